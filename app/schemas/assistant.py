# app/schemas/assistant.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from app.schemas.chat import AttachmentIn
from app.schemas.sentiment import SentimentOut


class ChatTurnRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=255)
    session_id: Optional[str] = None
    create_new_session: bool = False
    text: str = ""
    attachments: List[AttachmentIn] = []
    language: Literal["en", "zh"] = "en"
    # case already opened for this conversation; escalation happens once
    escalated_case_id: Optional[str] = None


class BankingQueryOut(BaseModel):
    type: Optional[str]
    guide: Optional[Dict[str, Any]]
    links: List[Dict[str, Any]]


class ChatTurnResponse(BaseModel):
    session_id: str
    user_id: str
    reply: str
    sentiment: SentimentOut
    banking: BankingQueryOut
    escalate: bool
    case_id: Optional[str] = None
    case_url: Optional[str] = None


class TurnIn(BaseModel):
    sender: Literal["user", "bot"]
    text: str


class CompletionRequest(BaseModel):
    messages: List[TurnIn]
    language: Literal["en", "zh"] = "en"


class CompletionResponse(BaseModel):
    message: str


class AnalyzeRequest(BaseModel):
    text: str


class AnalyzeResponse(BaseModel):
    sentiment: SentimentOut
    banking: BankingQueryOut
