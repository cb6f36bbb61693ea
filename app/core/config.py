# app/core/config.py
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    APP_NAME: str = "Support Assistant Backend"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./support.db"
    CORS_ORIGINS: List[str] = ["*"]

    # chat completion collaborator (any OpenAI-compatible server, e.g. Ollama at http://localhost:11434/v1)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    LLM_TEMPERATURE: float = 0.4
    LLM_TIMEOUT_SECONDS: float = 60.0

    # used to build the case link encoded in QR codes
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    MAX_ATTACHMENTS_PER_MESSAGE: int = 5
    MAX_ATTACHMENT_SIZE_BYTES: int = 5 * 1024 * 1024

    SESSION_LIST_LIMIT: int = 50
    SESSION_SEARCH_LIMIT: int = 20

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
