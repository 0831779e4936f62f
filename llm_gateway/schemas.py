"""Declarative shapes for LLM output, shared with the session models."""
from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):  # snake_case attributes, camelCase on the wire and on disk
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _require_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    return float(value)


def _clamp(value: float, low: int, high: int) -> int:
    return int(max(low, min(high, round(value))))


def _non_empty(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("must be a non-empty string")
    return value.strip()


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        raise ValueError("must be a list of strings")
    return [str(item).strip() for item in value if str(item).strip()]


class GeneratedQuestion(CamelModel):  # Question payload emitted by the model
    question: str
    type: str
    difficulty: int = Field(ge=1, le=5)
    expected_key_points: List[str] = Field(default_factory=list)

    @field_validator("question", "type", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _non_empty(value)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty(cls, value: Any) -> int:
        return _clamp(_require_number(value), 1, 5)

    @field_validator("expected_key_points", mode="before")
    @classmethod
    def _points(cls, value: Any) -> List[str]:
        return _string_list(value)


class GeneratedEvaluation(CamelModel):  # Answer evaluation emitted by the model
    score: int = Field(ge=0, le=100)
    feedback: str
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    key_points_covered: List[str] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def _score(cls, value: Any) -> int:
        return _clamp(_require_number(value), 0, 100)

    @field_validator("feedback", mode="before")
    @classmethod
    def _feedback(cls, value: Any) -> str:
        return _non_empty(value)

    @field_validator("strengths", "improvements", "key_points_covered", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> List[str]:
        return _string_list(value)


class CategoryScores(CamelModel):  # Per-category report scores
    technical: int = Field(default=0, ge=0, le=100)
    communication: int = Field(default=0, ge=0, le=100)
    problem_solving: int = Field(default=0, ge=0, le=100)

    @field_validator("technical", "communication", "problem_solving", mode="before")
    @classmethod
    def _bounded(cls, value: Any) -> int:
        return _clamp(_require_number(value), 0, 100)


class GeneratedReport(CamelModel):  # Final report emitted by the model
    overall_score: int = Field(ge=0, le=100)
    summary: str
    category_scores: CategoryScores = Field(default_factory=CategoryScores)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("overall_score", mode="before")
    @classmethod
    def _overall(cls, value: Any) -> int:
        return _clamp(_require_number(value), 0, 100)

    @field_validator("summary", mode="before")
    @classmethod
    def _summary(cls, value: Any) -> str:
        return _non_empty(value)

    @field_validator("strengths", "improvements", "recommendations", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> List[str]:
        return _string_list(value)


__all__ = [
    "CamelModel",
    "CategoryScores",
    "GeneratedEvaluation",
    "GeneratedQuestion",
    "GeneratedReport",
]
