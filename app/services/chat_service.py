# app/services/chat_service.py
import base64
import binascii
import json
import logging
import uuid
from typing import Dict, List, Optional, Tuple

from fastapi import HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.models.attachment import Attachment
from app.models.chat_message import ChatMessage
from app.models.chat_session import ChatSession
from app.schemas.chat import AttachmentIn, ChatSessionOut, ChatSessionWithMessagesOut
from app.services.sentiment_service import analyze_sentiment
from app.utils.csv_export import format_timestamp, rows_to_csv
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100
SENDERS = ("user", "bot")
EXPORT_FORMATS = ("csv", "json")


def make_preview(text: str) -> str:
    if len(text) > PREVIEW_LENGTH:
        return text[:PREVIEW_LENGTH] + "..."
    return text


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ChatService:
    def __init__(self, db: Session):
        self.db = db

    def _generate_session_id(self) -> str:
        millis = int(utcnow().timestamp() * 1000)
        return f"session-{millis}-{uuid.uuid4().hex[:9]}"

    def _commit(self, failure_message: str):
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(failure_message)
            raise HTTPException(status_code=500, detail=f"{failure_message}. Please try again later.")

    # -------------------
    # Sessions
    # -------------------
    def _new_session(self, user_id: str, title: Optional[str] = None) -> ChatSession:
        """Adds a session to the current transaction without committing it."""
        now = utcnow()
        session = ChatSession(
            id=self._generate_session_id(),
            user_id=user_id,
            title=title or None,
            created_at=now,
            updated_at=now,
            is_bookmarked=False,
            last_message_preview=None,
        )
        self.db.add(session)
        return session

    def create_session(self, user_id: str, title: Optional[str] = None) -> ChatSession:
        session = self._new_session(user_id, title)
        self._commit("Failed to create session")
        self.db.refresh(session)
        return session

    def get_owned_session(self, session_id: str, user_id: str) -> Optional[ChatSession]:
        return (
            self.db.query(ChatSession)
            .filter(ChatSession.id == session_id, ChatSession.user_id == user_id)
            .first()
        )

    def get_session(self, session_id: str, user_id: str) -> Optional[ChatSession]:
        """Session with its messages oldest-first and their attachments, or None if not owned by user_id."""
        return (
            self.db.query(ChatSession)
            .options(selectinload(ChatSession.messages).selectinload(ChatMessage.attachments))
            .filter(ChatSession.id == session_id, ChatSession.user_id == user_id)
            .first()
        )

    def _message_counts(self, session_ids: List[str]) -> Dict[str, int]:
        if not session_ids:
            return {}
        rows = (
            self.db.query(ChatMessage.session_id, func.count(ChatMessage.id))
            .filter(ChatMessage.session_id.in_(session_ids))
            .group_by(ChatMessage.session_id)
            .all()
        )
        return {session_id: count for session_id, count in rows}

    def _summaries(self, sessions: List[ChatSession]) -> List[ChatSessionOut]:
        counts = self._message_counts([s.id for s in sessions])
        return [
            ChatSessionOut.model_validate(s).model_copy(update={"message_count": counts.get(s.id, 0)})
            for s in sessions
        ]

    def list_sessions(self, user_id: str, limit: Optional[int] = None, offset: int = 0) -> List[ChatSessionOut]:
        sessions = (
            self.db.query(ChatSession)
            .filter(ChatSession.user_id == user_id)
            .order_by(ChatSession.updated_at.desc())
            .offset(offset)
            .limit(limit or settings.SESSION_LIST_LIMIT)
            .all()
        )
        return self._summaries(sessions)

    def search_sessions(self, user_id: str, query: str, limit: Optional[int] = None) -> List[ChatSessionOut]:
        pattern = _like_pattern(query)
        matching_messages = select(ChatMessage.session_id).where(
            ChatMessage.text.ilike(pattern, escape="\\")
        )
        sessions = (
            self.db.query(ChatSession)
            .filter(
                ChatSession.user_id == user_id,
                or_(
                    ChatSession.title.ilike(pattern, escape="\\"),
                    ChatSession.last_message_preview.ilike(pattern, escape="\\"),
                    ChatSession.id.in_(matching_messages),
                ),
            )
            .order_by(ChatSession.updated_at.desc())
            .limit(limit or settings.SESSION_SEARCH_LIMIT)
            .all()
        )
        return self._summaries(sessions)

    def list_bookmarked(self, user_id: str) -> List[ChatSessionOut]:
        sessions = (
            self.db.query(ChatSession)
            .filter(ChatSession.user_id == user_id, ChatSession.is_bookmarked.is_(True))
            .order_by(ChatSession.updated_at.desc())
            .all()
        )
        return self._summaries(sessions)

    def toggle_bookmark(self, session_id: str, user_id: str) -> Optional[bool]:
        session = self.get_owned_session(session_id, user_id)
        if not session:
            return None
        session.is_bookmarked = not session.is_bookmarked
        self._commit("Failed to update session")
        return session.is_bookmarked

    def rename_session(self, session_id: str, user_id: str, title: str) -> bool:
        session = self.get_owned_session(session_id, user_id)
        if not session:
            return False
        session.title = title
        self._commit("Failed to update session")
        return True

    def delete_session(self, session_id: str, user_id: str) -> bool:
        session = self.get_owned_session(session_id, user_id)
        if not session:
            return False
        # messages and their attachments go with it
        self.db.delete(session)
        self._commit("Failed to delete session")
        logger.info(f"Deleted session {session_id}")
        return True

    # -------------------
    # Messages
    # -------------------
    def _decode_attachments(self, attachments: List[AttachmentIn]) -> List[Tuple[AttachmentIn, bytes]]:
        max_count = settings.MAX_ATTACHMENTS_PER_MESSAGE
        max_size = settings.MAX_ATTACHMENT_SIZE_BYTES
        if len(attachments) > max_count:
            raise HTTPException(
                status_code=400,
                detail=f"You can attach up to {max_count} files per message.",
            )

        decoded = []
        for attachment in attachments:
            too_large = HTTPException(
                status_code=400,
                detail=f'File "{attachment.file_name}" exceeds the maximum size of {round(max_size / (1024 * 1024))}MB.',
            )
            if attachment.file_size > max_size:
                raise too_large
            try:
                data = base64.b64decode(attachment.data, validate=True)
            except (binascii.Error, ValueError):
                raise HTTPException(
                    status_code=400,
                    detail=f'File "{attachment.file_name}" is not valid base64 data.',
                )
            if len(data) > max_size:
                raise too_large
            decoded.append((attachment, data))
        return decoded

    def validate_message(
        self,
        sender: str,
        text: Optional[str],
        attachments: Optional[List[AttachmentIn]] = None,
    ) -> List[Tuple[AttachmentIn, bytes]]:
        """Checks a message before anything is written. Returns the decoded attachments."""
        attachments = attachments or []
        if sender not in SENDERS:
            raise HTTPException(status_code=400, detail="Sender must be 'user' or 'bot'")
        if not (text or "").strip() and not attachments:
            raise HTTPException(status_code=400, detail="Sender and either text or attachments are required")
        return self._decode_attachments(attachments)

    def resolve_session(
        self,
        user_id: str,
        session_id: Optional[str] = None,
        create_new_session: bool = False,
    ) -> Optional[ChatSession]:
        """The owned session to append to, or None when a new one should be started."""
        if not session_id or create_new_session:
            return None
        session = self.get_owned_session(session_id, user_id)
        if not session:
            raise HTTPException(status_code=404, detail="Session not found")
        return session

    def append_message(
        self,
        user_id: str,
        session: Optional[ChatSession],
        sender: str,
        text: Optional[str],
        decoded: List[Tuple[AttachmentIn, bytes]],
    ) -> Tuple[ChatSession, ChatMessage]:
        """
        Write an already validated message.

        When `session` is None a new session is started. The session, the
        message, its attachments and the session preview are committed
        together, so a failure leaves no row behind.
        """
        text = text or ""
        if session is None:
            session = self._new_session(user_id)

        now = utcnow()
        message = ChatMessage(session_id=session.id, sender=sender, text=text, timestamp=now)
        if sender == "user":
            sentiment = analyze_sentiment(text)
            message.sentiment_score = sentiment["score"]
            message.sentiment_comparative = sentiment["comparative"]
            message.sentiment_label = sentiment["label"]
            message.sentiment_magnitude = sentiment["magnitude"]

        try:
            self.db.add(message)
            self.db.flush()  # message id
            for position, (attachment, data) in enumerate(decoded):
                self.db.add(Attachment(
                    id=str(uuid.uuid4()),
                    message_id=message.id,
                    file_name=attachment.file_name,
                    mime_type=attachment.mime_type or "application/octet-stream",
                    file_size=attachment.file_size,
                    position=position,
                    data=data,
                ))
            session.last_message_preview = make_preview(text)
            session.updated_at = now
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to save message to session {session.id}")
            raise HTTPException(status_code=500, detail="Failed to save message. Please try again later.")

        self.db.refresh(message)
        return session, message

    def save_message(
        self,
        session: ChatSession,
        sender: str,
        text: Optional[str],
        attachments: Optional[List[AttachmentIn]] = None,
    ) -> ChatMessage:
        decoded = self.validate_message(sender, text, attachments)
        _, message = self.append_message(session.user_id, session, sender, text, decoded)
        return message

    def save_message_for_user(
        self,
        user_id: str,
        sender: str,
        text: Optional[str],
        attachments: Optional[List[AttachmentIn]] = None,
        session_id: Optional[str] = None,
        create_new_session: bool = False,
    ) -> Tuple[ChatSession, ChatMessage]:
        session = self.resolve_session(user_id, session_id, create_new_session)
        decoded = self.validate_message(sender, text, attachments)
        return self.append_message(user_id, session, sender, text, decoded)

    # -------------------
    # Export
    # -------------------
    def export_session(self, session_id: str, user_id: str, fmt: str = "json") -> Optional[Tuple[str, str, str]]:
        """Returns (content, media_type, filename) or None if the session is not found."""
        fmt = (fmt or "json").lower()
        if fmt not in EXPORT_FORMATS:
            raise HTTPException(status_code=400, detail="Unsupported format. Use csv or json.")

        session = self.get_session(session_id, user_id)
        if not session:
            return None

        if fmt == "csv":
            rows = [["Timestamp", "Sender", "Message"]]
            for msg in session.messages:
                rows.append([format_timestamp(msg.timestamp), msg.sender, msg.text])
            return rows_to_csv(rows), "text/csv; charset=utf-8", f"chat-{session_id}.csv"

        payload = {"session": ChatSessionWithMessagesOut.model_validate(session).model_dump(mode="json")}
        return json.dumps(payload, ensure_ascii=False, indent=2), "application/json", f"chat-{session_id}.json"
