# app/models/chat_message.py
from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base
from app.utils.timeutils import utcnow


class ChatMessage(Base):
    __tablename__ = "chat_messages"
    __table_args__ = (
        CheckConstraint("sender IN ('user', 'bot')", name="ck_chat_messages_sender"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(64), ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    sender = Column(String(10), nullable=False)  # "user" | "bot"
    text = Column(Text, nullable=False, default="")
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    # only populated for user messages
    sentiment_score = Column(Float, nullable=True)
    sentiment_comparative = Column(Float, nullable=True)
    sentiment_label = Column(String(16), nullable=True)
    sentiment_magnitude = Column(String(16), nullable=True)

    session = relationship("ChatSession", back_populates="messages")
    attachments = relationship(
        "Attachment",
        back_populates="message",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Attachment.position",
    )

    @property
    def sentiment(self):
        if self.sentiment_score is None:
            return None
        return {
            "score": self.sentiment_score,
            "comparative": self.sentiment_comparative,
            "label": self.sentiment_label,
            "magnitude": self.sentiment_magnitude,
        }
