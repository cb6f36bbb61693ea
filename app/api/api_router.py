# app/api/api_router.py
from fastapi import APIRouter
from app.api.v1 import cases, sessions, chat

api_router = APIRouter()
api_router.include_router(cases.router, prefix="/v1/cases", tags=["cases"])
api_router.include_router(sessions.router, prefix="/v1/sessions", tags=["sessions"])
api_router.include_router(chat.router, prefix="/v1/chat", tags=["chat"])
