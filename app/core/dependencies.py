# app/core/dependencies.py
from app.db.session import SessionLocal
from app.services.llm_service import LLMService


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_llm_service() -> LLMService:
    return LLMService()
