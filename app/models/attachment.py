# app/models/attachment.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, LargeBinary
from sqlalchemy.orm import relationship
from app.db.base import Base
from app.utils.timeutils import utcnow


class Attachment(Base):
    __tablename__ = "attachments"
    id = Column(String(64), primary_key=True)
    message_id = Column(Integer, ForeignKey("chat_messages.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    mime_type = Column(String(255), nullable=False, default="application/octet-stream")
    file_size = Column(Integer, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    data = Column(LargeBinary, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    message = relationship("ChatMessage", back_populates="attachments")
