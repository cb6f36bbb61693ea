# app/models/case.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base
from app.utils.timeutils import utcnow

CASE_STATUSES = ("open", "escalated", "resolved")


class Case(Base):
    __tablename__ = "cases"
    __table_args__ = (
        CheckConstraint("status IN ('open', 'escalated', 'resolved')", name="ck_cases_status"),
    )

    id = Column(String(64), primary_key=True)
    status = Column(String(20), nullable=False, default="open", index=True)
    summary = Column(Text, nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    # set the first time the case becomes escalated, never moved afterwards
    escalated_at = Column(DateTime(timezone=True), nullable=True)

    messages = relationship(
        "CaseMessage",
        back_populates="case",
        cascade="all, delete-orphan",
        order_by="CaseMessage.position",
    )


class CaseMessage(Base):
    __tablename__ = "case_messages"
    __table_args__ = (
        CheckConstraint("sender IN ('user', 'bot')", name="ck_case_messages_sender"),
    )

    id = Column(Integer, primary_key=True, index=True)
    case_id = Column(String(64), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    sender = Column(String(10), nullable=False)
    text = Column(Text, nullable=False, default="")
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    sentiment = Column(JSON, nullable=True)

    case = relationship("Case", back_populates="messages")
