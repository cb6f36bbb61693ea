# app/models/chat_session.py
from sqlalchemy import Column, String, Boolean, DateTime, Text
from sqlalchemy.orm import relationship
from app.db.base import Base
from app.utils.timeutils import utcnow


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(String(64), primary_key=True)
    # browser-generated correlation key, not an authenticated identity
    user_id = Column(String(255), nullable=False, index=True)
    title = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    is_bookmarked = Column(Boolean, nullable=False, default=False, index=True)
    last_message_preview = Column(Text, nullable=True)

    messages = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[ChatMessage.timestamp, ChatMessage.id]",
    )
