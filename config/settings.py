"""Application settings and configuration management."""
from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3.2:3b"

    GROQ_API_KEY: str | None = None
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GROQ_MODEL: str = "llama-3.1-8b-instant"

    LLM_TIMEOUT_S: float = Field(default=120.0, ge=0.1)
    LLM_MAX_RETRIES: int = Field(default=1, ge=0)
    RATE_LIMIT_BACKOFF_S: float = Field(default=2.0, ge=0.0)
    RATE_LIMIT_RETRIES: int = Field(default=2, ge=0)
    DISCOVERY_TIMEOUT_S: float = Field(default=5.0, ge=0.1)

    MAX_SESSION_AGE_MS: int = Field(default=7_200_000, ge=1)
    SESSIONS_DIR: str = "data/sessions"
    COMPLETED_RETENTION_S: float = 600.0
    CLEANUP_INTERVAL_S: float = 600.0

    MIN_QUESTIONS: int = 3
    MAX_QUESTIONS: int = 10
    MAX_DURATION_S: int = 1800

    HOST: str = "0.0.0.0"
    PORT: int = 5000
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", validate_assignment=True)


settings = Settings()
