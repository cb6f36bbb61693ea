# app/api/v1/sessions.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.dependencies import get_db
from app.schemas.chat import (
    SessionCreate,
    SessionOut,
    SessionDetailOut,
    SessionListOut,
    SaveMessageRequest,
    SaveMessageResponse,
    SessionOwnerRequest,
    SessionTitleUpdate,
    BookmarkOut,
    SuccessOut,
)
from app.services.chat_service import ChatService

router = APIRouter(tags=["Sessions"])

SESSION_NOT_FOUND = "Session not found"


@router.post("", response_model=SessionOut)
def create_session(payload: SessionCreate, db: Session = Depends(get_db)):
    session = ChatService(db).create_session(payload.user_id, payload.title)
    return {"session": session}


@router.get("", response_model=SessionListOut)
def list_sessions(
    user_id: str = Query(..., min_length=1),
    limit: Optional[int] = Query(None, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    sessions = ChatService(db).list_sessions(user_id, limit=limit, offset=offset)
    return {"sessions": sessions, "user_id": user_id}


@router.get("/search", response_model=SessionListOut)
def search_sessions(
    user_id: str = Query(..., min_length=1),
    q: str = Query(..., min_length=1),
    limit: Optional[int] = Query(None, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return {"sessions": ChatService(db).search_sessions(user_id, q, limit=limit)}


@router.get("/bookmarked", response_model=SessionListOut)
def bookmarked_sessions(user_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return {"sessions": ChatService(db).list_bookmarked(user_id)}


@router.post("/messages", response_model=SaveMessageResponse)
def save_message(payload: SaveMessageRequest, db: Session = Depends(get_db)):
    session, message = ChatService(db).save_message_for_user(
        user_id=payload.user_id,
        sender=payload.sender,
        text=payload.text,
        attachments=payload.attachments,
        session_id=payload.session_id,
        create_new_session=payload.create_new_session,
    )
    return {
        "success": True,
        "session_id": session.id,
        "user_id": payload.user_id,
        "message_id": message.id,
    }


@router.get("/{session_id}", response_model=SessionDetailOut)
def get_session(session_id: str, user_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    session = ChatService(db).get_session(session_id, user_id)
    if not session:
        raise HTTPException(status_code=404, detail=SESSION_NOT_FOUND)
    return {"session": session}


@router.patch("/{session_id}/bookmark", response_model=BookmarkOut)
def toggle_bookmark(session_id: str, payload: SessionOwnerRequest, db: Session = Depends(get_db)):
    is_bookmarked = ChatService(db).toggle_bookmark(session_id, payload.user_id)
    if is_bookmarked is None:
        raise HTTPException(status_code=404, detail=SESSION_NOT_FOUND)
    return {"is_bookmarked": is_bookmarked}


@router.patch("/{session_id}/title", response_model=SuccessOut)
def rename_session(session_id: str, payload: SessionTitleUpdate, db: Session = Depends(get_db)):
    if not ChatService(db).rename_session(session_id, payload.user_id, payload.title):
        raise HTTPException(status_code=404, detail=SESSION_NOT_FOUND)
    return {"success": True}


@router.delete("/{session_id}", response_model=SuccessOut)
def delete_session(session_id: str, user_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    if not ChatService(db).delete_session(session_id, user_id):
        raise HTTPException(status_code=404, detail=SESSION_NOT_FOUND)
    return {"success": True}


@router.get("/{session_id}/export")
def export_session(
    session_id: str,
    user_id: str = Query(..., min_length=1),
    format: str = Query("json"),
    db: Session = Depends(get_db),
):
    result = ChatService(db).export_session(session_id, user_id, format)
    if result is None:
        raise HTTPException(status_code=404, detail=SESSION_NOT_FOUND)
    content, media_type, filename = result
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
