# app/api/v1/cases.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session
from app.core.dependencies import get_db
from app.schemas.case import (
    CaseCreate,
    CaseEscalate,
    CaseStatusUpdate,
    CaseCreatedOut,
    CaseDetailOut,
    CaseUpdatedOut,
    CaseListOut,
    CaseStatsOut,
    CaseQRCodeOut,
)
from app.services.case_service import CaseService
from app.utils.timeutils import utcnow

router = APIRouter()


def _csv_download(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-store",
        },
    )


@router.post("", response_model=CaseCreatedOut)
def create_case(payload: CaseCreate, db: Session = Depends(get_db)):
    svc = CaseService(db)
    case = svc.create_case(
        payload.messages,
        summary=payload.summary,
        contact_email=payload.contact_email,
        contact_phone=payload.contact_phone,
    )
    return {"case_id": case.id, "case": case}


@router.post("/escalate", response_model=CaseCreatedOut)
def escalate_case(payload: CaseEscalate, db: Session = Depends(get_db)):
    svc = CaseService(db)
    case = svc.escalate_case(
        payload.messages,
        reason=payload.reason,
        contact_email=payload.contact_email,
        contact_phone=payload.contact_phone,
    )
    return {"case_id": case.id, "case": case}


@router.get("", response_model=CaseListOut)
def list_cases(status: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """
    List cases newest first, optionally filtered by status
    """
    return {"cases": CaseService(db).list_cases(status=status)}


@router.get("/stats", response_model=CaseStatsOut)
def case_stats(db: Session = Depends(get_db)):
    return CaseService(db).stats()


@router.get("/export")
def export_cases(
    status: Optional[str] = Query(None),
    format: str = Query("csv"),
    db: Session = Depends(get_db),
):
    if format.lower() != "csv":
        raise HTTPException(status_code=400, detail="Unsupported format")
    csv_text = CaseService(db).export_cases_csv(status=status)
    stamp = int(utcnow().timestamp() * 1000)
    return _csv_download(csv_text, f"cases-{stamp}.csv")


@router.get("/{case_id}", response_model=CaseDetailOut)
def get_case(case_id: str, db: Session = Depends(get_db)):
    c = CaseService(db).get_case(case_id)
    if not c:
        raise HTTPException(status_code=404, detail=f"Case not found: {case_id}")
    return {"case": c}


@router.patch("/{case_id}", response_model=CaseUpdatedOut)
def update_case_status(case_id: str, payload: CaseStatusUpdate, db: Session = Depends(get_db)):
    c = CaseService(db).update_status(case_id, payload.status)
    if not c:
        raise HTTPException(status_code=404, detail=f"Case not found: {case_id}")
    return {"success": True, "case": c}


@router.get("/{case_id}/export")
def export_case(case_id: str, db: Session = Depends(get_db)):
    csv_text = CaseService(db).export_case_csv(case_id)
    if csv_text is None:
        raise HTTPException(status_code=404, detail=f"Case not found: {case_id}")
    return _csv_download(csv_text, f"case-{case_id}.csv")


@router.get("/{case_id}/qrcode", response_model=CaseQRCodeOut)
def case_qrcode(case_id: str, db: Session = Depends(get_db)):
    """
    QR code (PNG data URL) linking to the case page, for handing a conversation to staff
    """
    result = CaseService(db).qr_code_for(case_id)
    if not result:
        raise HTTPException(status_code=404, detail=f"Case not found: {case_id}")
    return result
