# app/services/llm_service.py
import logging
from typing import Dict, List, Optional

import openai
from fastapi import HTTPException
from openai import OpenAI

from app.core.config import settings

logger = logging.getLogger(__name__)

EMPTY_REPLY = "Sorry, I could not generate a response."

LANGUAGE_NAMES = {"en": "English", "zh": "Simplified Chinese"}

SYSTEM_PROMPT = """You are the virtual assistant of a retail bank's customer support desk.
Help customers with banking enquiries in a friendly, professional manner.
Always respond in {language} unless the customer explicitly asks for another language.

You can help with account management, card services (lost or stolen cards, activation,
blocking), money transfers, loans, investments and digital banking.
24/7 hotline: 1800 363 3333 (Singapore) or +65 6363 3333 (overseas).

Give clear step-by-step instructions, mention self-service options, and stress security
best practices. If you cannot fully resolve an issue, say so and suggest speaking to a
human agent."""


class LLMService:
    """Thin wrapper over an OpenAI-compatible chat completion endpoint."""

    def __init__(self, client: Optional[OpenAI] = None):
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                # local OpenAI-compatible servers accept any key
                api_key=settings.OPENAI_API_KEY or "not-needed",
                base_url=settings.OPENAI_BASE_URL,
                timeout=settings.LLM_TIMEOUT_SECONDS,
            )
        return self._client

    def build_messages(self, prior_turns: List[Dict[str, str]], new_user_text: Optional[str], language: str = "en"):
        messages = [{
            "role": "system",
            "content": SYSTEM_PROMPT.format(language=LANGUAGE_NAMES.get(language, "English")),
        }]
        for turn in prior_turns:
            role = "user" if turn["sender"] == "user" else "assistant"
            messages.append({"role": role, "content": turn["text"]})
        if new_user_text is not None:
            messages.append({"role": "user", "content": new_user_text})
        return messages

    def generate_reply(self, prior_turns: List[Dict[str, str]], new_user_text: Optional[str] = None, language: str = "en") -> str:
        messages = self.build_messages(prior_turns, new_user_text, language)
        try:
            completion = self.client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=messages,
                temperature=settings.LLM_TEMPERATURE,
            )
        except openai.APIConnectionError as e:
            logger.warning(f"Chat completion endpoint unreachable: {e}")
            raise HTTPException(
                status_code=503,
                detail="The assistant is currently unreachable. Please try again in a few minutes.",
            )
        except openai.APIError as e:
            logger.warning(f"Chat completion failed: {e}")
            raise HTTPException(
                status_code=503,
                detail="The assistant could not answer right now. Please try again or ask to speak to our support team.",
            )

        content = completion.choices[0].message.content if completion.choices else None
        return content.strip() if content and content.strip() else EMPTY_REPLY
