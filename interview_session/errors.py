"""Errors raised by the session store and the interview engine."""
from __future__ import annotations


class InterviewError(RuntimeError):  # Base error for interview state problems
    pass


class SessionNotFoundError(InterviewError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class SessionExpiredError(InterviewError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session has expired: {session_id}")
        self.session_id = session_id


class ReportNotFoundError(InterviewError):
    def __init__(self, report_id: str) -> None:
        super().__init__(f"Report not found: {report_id}")
        self.report_id = report_id


class NoActiveQuestionError(InterviewError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"No active question found for session {session_id}")
        self.session_id = session_id


class SessionCompletedError(InterviewError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session already completed: {session_id}")
        self.session_id = session_id


class PersistenceError(InterviewError):  # Disk write failed; the caller must not report success
    pass


__all__ = [
    "InterviewError",
    "NoActiveQuestionError",
    "PersistenceError",
    "ReportNotFoundError",
    "SessionCompletedError",
    "SessionExpiredError",
    "SessionNotFoundError",
]
