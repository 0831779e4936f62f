from __future__ import annotations  # Session aggregate, errors and store exports

from .errors import (
    InterviewError,
    NoActiveQuestionError,
    PersistenceError,
    ReportNotFoundError,
    SessionCompletedError,
    SessionExpiredError,
    SessionNotFoundError,
)
from .models import (
    LEVELS,
    Answer,
    AudioMetadata,
    Evaluation,
    InterviewConfig,
    Level,
    QAPair,
    Question,
    Report,
    Session,
    SessionContext,
    SessionStatus,
    now_ms,
)
from .store import SessionStore

__all__ = [
    "LEVELS",
    "Answer",
    "AudioMetadata",
    "Evaluation",
    "InterviewConfig",
    "InterviewError",
    "Level",
    "NoActiveQuestionError",
    "PersistenceError",
    "QAPair",
    "Question",
    "Report",
    "ReportNotFoundError",
    "Session",
    "SessionCompletedError",
    "SessionContext",
    "SessionExpiredError",
    "SessionNotFoundError",
    "SessionStatus",
    "SessionStore",
    "now_ms",
]
