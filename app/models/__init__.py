# app/models/__init__.py
from app.models import case, chat_session, chat_message, attachment  # noqa: F401
from app.models.case import Case, CaseMessage, CASE_STATUSES
from app.models.chat_session import ChatSession
from app.models.chat_message import ChatMessage
from app.models.attachment import Attachment

__all__ = ["Case", "CaseMessage", "CASE_STATUSES", "ChatSession", "ChatMessage", "Attachment"]
