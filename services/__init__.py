"""Interview orchestration services."""
from .engine import InterviewEngine, TurnResult
from .locks import KeyedLock
from .policy import ContinuationPolicy

__all__ = ["ContinuationPolicy", "InterviewEngine", "KeyedLock", "TurnResult"]
