# app/schemas/chat.py
import base64
from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime
from app.schemas.sentiment import SentimentOut


class AttachmentIn(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    mime_type: str = Field(min_length=1, max_length=255)
    file_size: int = Field(ge=0)
    data: str  # base64


class AttachmentOut(BaseModel):
    id: str
    file_name: str
    mime_type: str
    file_size: int
    data: str

    @field_validator("data", mode="before")
    @classmethod
    def encode_data(cls, value):
        if isinstance(value, (bytes, bytearray, memoryview)):
            return base64.b64encode(bytes(value)).decode("ascii")
        return value

    class Config:
        from_attributes = True


class ChatMessageOut(BaseModel):
    id: int
    sender: str
    text: str
    timestamp: datetime
    sentiment: Optional[SentimentOut] = None
    attachments: List[AttachmentOut] = []

    class Config:
        from_attributes = True


class ChatSessionOut(BaseModel):
    id: str
    user_id: str
    title: Optional[str]
    created_at: datetime
    updated_at: datetime
    is_bookmarked: bool
    last_message_preview: Optional[str]
    message_count: Optional[int] = None

    class Config:
        from_attributes = True


class ChatSessionWithMessagesOut(ChatSessionOut):
    messages: List[ChatMessageOut] = []


class SessionCreate(BaseModel):
    user_id: str = Field(min_length=1, max_length=255)
    title: Optional[str] = Field(default=None, max_length=500)


class SessionOut(BaseModel):
    session: ChatSessionOut


class SessionDetailOut(BaseModel):
    session: ChatSessionWithMessagesOut


class SessionListOut(BaseModel):
    sessions: List[ChatSessionOut]
    user_id: Optional[str] = None


class SaveMessageRequest(BaseModel):
    session_id: Optional[str] = None
    user_id: str = Field(min_length=1, max_length=255)
    sender: Literal["user", "bot"]
    text: Optional[str] = None
    attachments: List[AttachmentIn] = []
    create_new_session: bool = False


class SaveMessageResponse(BaseModel):
    success: bool
    session_id: str
    user_id: str
    message_id: int


class SessionOwnerRequest(BaseModel):
    user_id: str = Field(min_length=1)


class SessionTitleUpdate(BaseModel):
    user_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=500)


class BookmarkOut(BaseModel):
    is_bookmarked: bool


class SuccessOut(BaseModel):
    success: bool
