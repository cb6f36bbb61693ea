# app/services/escalation_service.py
from typing import Optional
from app.services.sentiment_service import is_strongly_negative

# phrases in a bot reply meaning it could not resolve the enquiry
BOT_ESCALATION_KEYWORDS = [
    "cannot help",
    "can't help",
    "unable to assist",
    "need human",
    "speak to someone",
    "talk to agent",
    "transfer",
    "escalate",
    "complex issue",
    "not sure",
    "unclear",
]

# explicit requests from the customer for a person
USER_ESCALATION_KEYWORDS = [
    "speak to human",
    "talk to person",
    "agent",
    "representative",
    "manager",
    "supervisor",
    "escalate",
    "transfer",
    "complex",
    "complicated",
    "urgent",
    "emergency",
]


def _mentions_any(text: str, keywords) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in keywords)


def should_escalate(bot_reply: str, user_message: str, user_sentiment: Optional[dict] = None) -> bool:
    return (
        _mentions_any(bot_reply, BOT_ESCALATION_KEYWORDS)
        or _mentions_any(user_message, USER_ESCALATION_KEYWORDS)
        or is_strongly_negative(user_sentiment)
    )
