# app/schemas/sentiment.py
from pydantic import BaseModel
from typing import Literal


class SentimentOut(BaseModel):
    score: float
    comparative: float
    label: Literal["positive", "neutral", "negative"]
    magnitude: Literal["low", "medium", "high"]
