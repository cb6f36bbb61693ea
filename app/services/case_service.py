# app/services/case_service.py
import datetime
import logging
import uuid
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.models.case import Case, CaseMessage, CASE_STATUSES
from app.schemas.case import CaseMessageIn
from app.utils.csv_export import format_timestamp, rows_to_csv
from app.utils.qrcode_gen import generate_qr_data_url
from app.utils.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Customer enquiry requiring human assistance"


class CaseService:
    def __init__(self, db: Session):
        self.db = db

    def _generate_case_id(self) -> str:
        millis = int(utcnow().timestamp() * 1000)
        return f"CASE-{millis}-{uuid.uuid4().hex[:9].upper()}"

    def _validate_status(self, status: str):
        if status not in CASE_STATUSES:
            raise HTTPException(
                status_code=400,
                detail="Valid status is required (open, resolved, or escalated)",
            )

    def create_case(
        self,
        messages: List[CaseMessageIn],
        summary: Optional[str] = None,
        contact_email: Optional[str] = None,
        contact_phone: Optional[str] = None,
        status: str = "open",
    ) -> Case:
        self._validate_status(status)
        now = utcnow()
        c = Case(
            id=self._generate_case_id(),
            status=status,
            summary=summary or DEFAULT_SUMMARY,
            contact_email=contact_email or None,
            contact_phone=contact_phone or None,
            created_at=now,
            escalated_at=now if status == "escalated" else None,
        )
        # the case keeps its own copy of the conversation
        for position, msg in enumerate(messages):
            c.messages.append(CaseMessage(
                position=position,
                sender=msg.sender,
                text=msg.text or "",
                timestamp=msg.timestamp or now,
                sentiment=msg.sentiment.model_dump() if msg.sentiment else None,
            ))

        try:
            self.db.add(c)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to create case")
            raise HTTPException(status_code=500, detail="Failed to create case. Please try again later.")
        self.db.refresh(c)
        logger.info(f"Created case {c.id} with status {c.status} and {len(messages)} messages")
        return c

    def escalate_case(
        self,
        messages: List[CaseMessageIn],
        reason: Optional[str] = None,
        contact_email: Optional[str] = None,
        contact_phone: Optional[str] = None,
    ) -> Case:
        return self.create_case(
            messages,
            summary=reason,
            contact_email=contact_email,
            contact_phone=contact_phone,
            status="escalated",
        )

    def get_case(self, case_id: str) -> Optional[Case]:
        return (
            self.db.query(Case)
            .options(selectinload(Case.messages))
            .filter(Case.id == case_id)
            .first()
        )

    def list_cases(self, status: Optional[str] = None) -> List[Case]:
        query = self.db.query(Case).options(selectinload(Case.messages))
        if status and status != "all":
            self._validate_status(status)
            query = query.filter(Case.status == status)
        return query.order_by(Case.created_at.desc()).all()

    def update_status(self, case_id: str, status: str) -> Optional[Case]:
        self._validate_status(status)
        c = self.get_case(case_id)
        if not c:
            return None

        previous = c.status
        c.status = status
        # escalated_at records the first escalation only
        if status == "escalated" and c.escalated_at is None:
            c.escalated_at = utcnow()

        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to update status of case {case_id}")
            raise HTTPException(status_code=500, detail="Failed to update case. Please try again later.")
        self.db.refresh(c)
        logger.info(f"Case {case_id} status {previous} -> {status}")
        return c

    def case_url(self, case_id: str) -> str:
        return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/case/{case_id}"

    def qr_code_for(self, case_id: str) -> Optional[dict]:
        if not self.db.query(Case.id).filter(Case.id == case_id).first():
            return None
        url = self.case_url(case_id)
        return {"qr_code": generate_qr_data_url(url), "case_url": url, "case_id": case_id}

    # -------------------
    # CSV export
    # -------------------
    def export_case_csv(self, case_id: str) -> Optional[str]:
        c = self.get_case(case_id)
        if not c:
            return None

        rows = [
            ["Case ID", c.id],
            ["Status", c.status],
            ["Summary", c.summary or ""],
            ["Contact Email", c.contact_email or ""],
            ["Contact Phone", c.contact_phone or ""],
            ["Created At", format_timestamp(c.created_at)],
            ["Escalated At", format_timestamp(c.escalated_at)],
            [],
            ["Message #", "Sender", "Text", "Timestamp"],
        ]
        for index, msg in enumerate(c.messages, start=1):
            rows.append([str(index), msg.sender, msg.text or "", format_timestamp(msg.timestamp)])
        return rows_to_csv(rows)

    def export_cases_csv(self, status: Optional[str] = None) -> str:
        query = (
            self.db.query(Case, func.count(CaseMessage.id))
            .outerjoin(CaseMessage, CaseMessage.case_id == Case.id)
            .group_by(Case.id)
        )
        if status and status != "all":
            self._validate_status(status)
            query = query.filter(Case.status == status)

        rows = [[
            "Case ID", "Created At", "Status", "Summary",
            "Contact Email", "Contact Phone", "Escalated At", "Message Count",
        ]]
        for c, message_count in query.order_by(Case.created_at.desc()).all():
            rows.append([
                c.id,
                format_timestamp(c.created_at),
                c.status,
                c.summary or "",
                c.contact_email or "",
                c.contact_phone or "",
                format_timestamp(c.escalated_at),
                str(message_count or 0),
            ])
        return rows_to_csv(rows)

    # -------------------
    # Dashboard statistics
    # -------------------
    def stats(self, today: Optional[datetime.date] = None) -> dict:
        cases = self.list_cases()
        total = len(cases)
        counts = {s: sum(1 for c in cases if c.status == s) for s in CASE_STATUSES}
        total_messages = sum(len(c.messages) for c in cases)

        durations = []
        for c in cases:
            if c.status != "resolved":
                continue
            start = as_utc(c.created_at)
            end = as_utc(c.messages[-1].timestamp) if c.messages else start
            durations.append(max((end - start).total_seconds(), 0.0))

        today = today or utcnow().date()
        per_day = {}
        for c in cases:
            day = as_utc(c.created_at).date()
            per_day[day] = per_day.get(day, 0) + 1
        daily_activity = []
        for offset in range(6, -1, -1):
            day = today - datetime.timedelta(days=offset)
            daily_activity.append({"date": day.isoformat(), "count": per_day.get(day, 0)})

        return {
            "total": total,
            "open": counts["open"],
            "escalated": counts["escalated"],
            "resolved": counts["resolved"],
            "total_messages": total_messages,
            "average_messages_per_case": round(total_messages / total, 1) if total else 0.0,
            "resolution_rate": round(counts["resolved"] * 100 / total) if total else 0,
            "average_resolution_minutes": round(sum(durations) / len(durations) / 60, 1) if durations else None,
            "daily_activity": daily_activity,
        }
