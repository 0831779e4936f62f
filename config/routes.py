from __future__ import annotations  # Provider route configuration for the LLM gateway

from typing import Dict, Literal

from pydantic import BaseModel, Field

from .settings import Settings

Provider = Literal["ollama", "groq"]


class LlmRoute(BaseModel):  # LLM endpoint configuration
    provider: Provider
    base_url: str
    model: str
    timeout_s: float = Field(ge=0.1)
    discovery_timeout_s: float = Field(default=5.0, ge=0.1)
    max_retries: int = Field(default=1, ge=0)
    rate_limit_retries: int = Field(default=2, ge=0)
    backoff_s: float = Field(default=2.0, ge=0.0)
    api_key: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def name(self) -> str:  # Short label used in logs
        return f"{self.provider}:{self.model}"


def route_from_settings(cfg: Settings) -> LlmRoute:  # Pick provider by credential presence
    limits = {
        "timeout_s": cfg.LLM_TIMEOUT_S,
        "discovery_timeout_s": cfg.DISCOVERY_TIMEOUT_S,
        "max_retries": cfg.LLM_MAX_RETRIES,
        "rate_limit_retries": cfg.RATE_LIMIT_RETRIES,
        "backoff_s": cfg.RATE_LIMIT_BACKOFF_S,
    }
    if cfg.GROQ_API_KEY:
        return LlmRoute(
            provider="groq",
            base_url=cfg.GROQ_BASE_URL.rstrip("/"),
            model=cfg.GROQ_MODEL,
            api_key=cfg.GROQ_API_KEY,
            **limits,
        )
    return LlmRoute(
        provider="ollama",
        base_url=cfg.OLLAMA_BASE_URL.rstrip("/"),
        model=cfg.OLLAMA_MODEL,
        **limits,
    )
