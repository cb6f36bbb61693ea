# app/services/assistant_service.py
import logging
from typing import Any, Dict, List

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.chat_session import ChatSession
from app.schemas.assistant import ChatTurnRequest
from app.schemas.case import CaseMessageIn
from app.services.banking_service import banking_service
from app.services.case_service import CaseService
from app.services.chat_service import ChatService
from app.services.escalation_service import should_escalate
from app.services.llm_service import LLMService
from app.services.sentiment_service import analyze_sentiment

logger = logging.getLogger(__name__)

ESCALATION_REASON = "Bot unable to handle customer enquiry"


class AssistantService:
    def __init__(self, db: Session, llm: LLMService):
        self.db = db
        self.llm = llm
        self.chat = ChatService(db)
        self.cases = CaseService(db)

    def _prior_turns(self, session: ChatSession) -> List[Dict[str, str]]:
        return [{"sender": m.sender, "text": m.text} for m in session.messages if m.text]

    def _snapshot(self, session: ChatSession) -> List[CaseMessageIn]:
        return [
            CaseMessageIn(sender=m.sender, text=m.text, timestamp=m.timestamp, sentiment=m.sentiment)
            for m in session.messages
        ]

    def handle_turn(self, payload: ChatTurnRequest) -> Dict[str, Any]:
        text = payload.text.strip()
        if not text and not payload.attachments:
            raise HTTPException(status_code=400, detail="Message text or attachments are required")

        sentiment = analyze_sentiment(text)
        banking = banking_service.detect_banking_query(text)

        session = self.chat.resolve_session(payload.user_id, payload.session_id, payload.create_new_session)
        decoded = self.chat.validate_message("user", text, payload.attachments)

        # nothing is written until the assistant has answered
        prior_turns = self._prior_turns(session) if session is not None else []
        reply = self.llm.generate_reply(prior_turns, text, language=payload.language)

        session, _ = self.chat.append_message(payload.user_id, session, "user", text, decoded)
        self.chat.save_message(session, "bot", reply)

        escalate = should_escalate(reply, text, sentiment)
        case_id = payload.escalated_case_id
        if escalate and not case_id:
            self.db.expire(session, ["messages"])
            case = self.cases.escalate_case(self._snapshot(session), reason=ESCALATION_REASON)
            case_id = case.id
            logger.info(f"Escalated session {session.id} to case {case_id}")

        return {
            "session_id": session.id,
            "user_id": payload.user_id,
            "reply": reply,
            "sentiment": sentiment,
            "banking": banking,
            "escalate": escalate,
            "case_id": case_id,
            "case_url": self.cases.case_url(case_id) if case_id else None,
        }
