# tests/conftest.py
import os

# must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("PUBLIC_BASE_URL", "http://testserver")

from typing import Dict, List, Optional

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from app.core.dependencies import get_db, get_llm_service
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.services.llm_service import LLMService
from app import models  # noqa: F401


class FakeLLM(LLMService):
    """Returns scripted replies instead of calling a completion endpoint."""

    def __init__(self, replies: Optional[List[str]] = None):
        super().__init__(client=None)
        self.replies = list(replies or [])
        self.calls: List[Dict] = []
        # number of upcoming calls that behave like an unreachable endpoint
        self.failures = 0

    def generate_reply(self, prior_turns, new_user_text=None, language="en"):
        self.calls.append({"prior_turns": prior_turns, "new_user_text": new_user_text, "language": language})
        if self.failures:
            self.failures -= 1
            raise HTTPException(status_code=503, detail="The assistant is currently unreachable.")
        if self.replies:
            return self.replies.pop(0)
        return "Happy to help with that."


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def client(db, fake_llm):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_service] = lambda: fake_llm
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
