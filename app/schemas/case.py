# app/schemas/case.py
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime
from app.schemas.sentiment import SentimentOut


class CaseMessageIn(BaseModel):
    sender: Literal["user", "bot"]
    text: str = ""
    timestamp: Optional[datetime] = None
    sentiment: Optional[SentimentOut] = None


class CaseCreate(BaseModel):
    messages: List[CaseMessageIn]
    summary: Optional[str] = None
    contact_email: Optional[str] = Field(default=None, max_length=255)
    contact_phone: Optional[str] = Field(default=None, max_length=64)


class CaseEscalate(BaseModel):
    messages: List[CaseMessageIn]
    reason: Optional[str] = None
    contact_email: Optional[str] = Field(default=None, max_length=255)
    contact_phone: Optional[str] = Field(default=None, max_length=64)


class CaseStatusUpdate(BaseModel):
    # checked by CaseService so an unknown value is a 400, not a 422
    status: str


class CaseMessageOut(BaseModel):
    sender: str
    text: str
    timestamp: datetime
    sentiment: Optional[SentimentOut] = None

    class Config:
        from_attributes = True


class CaseOut(BaseModel):
    id: str
    status: str
    summary: Optional[str]
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    created_at: datetime
    escalated_at: Optional[datetime] = None
    messages: List[CaseMessageOut] = []

    class Config:
        from_attributes = True


class CaseCreatedOut(BaseModel):
    case_id: str
    case: CaseOut


class CaseDetailOut(BaseModel):
    case: CaseOut


class CaseUpdatedOut(BaseModel):
    success: bool
    case: CaseOut


class CaseListOut(BaseModel):
    cases: List[CaseOut]


class DailyActivity(BaseModel):
    date: str
    count: int


class CaseStatsOut(BaseModel):
    total: int
    open: int
    escalated: int
    resolved: int
    total_messages: int
    average_messages_per_case: float
    resolution_rate: int
    average_resolution_minutes: Optional[float]
    daily_activity: List[DailyActivity]


class CaseQRCodeOut(BaseModel):
    qr_code: str
    case_url: str
    case_id: str
