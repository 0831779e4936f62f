"""Continuation policy deciding whether another question is asked."""
from __future__ import annotations

from pydantic import BaseModel, Field

from config.settings import Settings


class ContinuationPolicy(BaseModel):
    """Interview length limits.

    Below ``min_answers`` the interview always continues; at ``max_answers`` it
    always stops; in between it stops once ``max_duration_ms`` has elapsed.
    """

    min_answers: int = Field(default=3, ge=0)
    max_answers: int = Field(default=10, ge=1)
    max_duration_ms: int = Field(default=1_800_000, ge=0)

    @classmethod
    def from_settings(cls, cfg: Settings) -> "ContinuationPolicy":
        return cls(
            min_answers=cfg.MIN_QUESTIONS,
            max_answers=cfg.MAX_QUESTIONS,
            max_duration_ms=cfg.MAX_DURATION_S * 1000,
        )

    def should_continue(self, answers: int, elapsed_ms: int) -> bool:
        if answers < self.min_answers:
            return True
        if answers >= self.max_answers:
            return False
        if elapsed_ms > self.max_duration_ms:
            return False
        return True


__all__ = ["ContinuationPolicy"]
