# app/api/v1/chat.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_llm_service
from app.schemas.assistant import (
    ChatTurnRequest,
    ChatTurnResponse,
    CompletionRequest,
    CompletionResponse,
    AnalyzeRequest,
    AnalyzeResponse,
)
from app.services.assistant_service import AssistantService
from app.services.banking_service import banking_service
from app.services.llm_service import LLMService
from app.services.sentiment_service import analyze_sentiment

router = APIRouter(tags=["Chat"])


@router.post("/message", response_model=ChatTurnResponse)
def send_message(
    payload: ChatTurnRequest,
    db: Session = Depends(get_db),
    llm: LLMService = Depends(get_llm_service),
):
    """
    One conversational turn: store the user message, ask the assistant, store the reply,
    and open an escalated case the first time the conversation needs a human.
    """
    service = AssistantService(db, llm)
    return service.handle_turn(payload)


@router.post("/completion", response_model=CompletionResponse)
def completion(payload: CompletionRequest, llm: LLMService = Depends(get_llm_service)):
    turns = [{"sender": m.sender, "text": m.text} for m in payload.messages]
    return {"message": llm.generate_reply(turns, language=payload.language)}


@router.post("/analyze", response_model=AnalyzeResponse)
def analyze(payload: AnalyzeRequest):
    return {
        "sentiment": analyze_sentiment(payload.text),
        "banking": banking_service.detect_banking_query(payload.text),
    }
