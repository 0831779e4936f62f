"""Pydantic schemas for the interview HTTP API."""
from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from interview_session import AudioMetadata, InterviewConfig, Level, Question, Report, Session, SessionStatus
from llm_gateway import CamelModel

T = TypeVar("T")


class StartReq(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str = Field(min_length=2, max_length=100)
    level: Level
    topics: List[str] = Field(min_length=1, max_length=5)


class AnswerReq(CamelModel):
    model_config = ConfigDict(extra="ignore")

    answer: str = Field(min_length=10, max_length=5000)
    audio_metadata: Optional[AudioMetadata] = None


class ApiResp(BaseModel, Generic[T]):
    success: bool = True
    data: T


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResp(BaseModel):
    success: bool = False
    error: str
    details: Optional[List[FieldError]] = None


class StartData(CamelModel):
    session_id: str
    question: Question


class EndData(CamelModel):
    report_id: str
    report: Report


class StatusData(CamelModel):
    session_id: str
    status: SessionStatus
    current_question_index: int
    total_questions: int
    total_answers: int
    config: InterviewConfig

    @classmethod
    def from_session(cls, session: Session) -> "StatusData":
        return cls(
            session_id=session.session_id,
            status=session.status,
            current_question_index=session.current_question_index,
            total_questions=len(session.questions),
            total_answers=len(session.answers),
            config=session.config,
        )


class SessionSummary(CamelModel):
    role: str
    level: Level
    topics: List[str]
    start_time: int
    end_time: Optional[int] = None
    duration: Optional[int] = None

    @classmethod
    def from_session(cls, session: Session) -> "SessionSummary":
        return cls(
            role=session.config.role,
            level=session.config.level,
            topics=list(session.config.topics),
            start_time=session.start_time,
            end_time=session.end_time,
            duration=session.duration_seconds(),
        )


class ReportView(Report):
    session: Optional[SessionSummary] = None


class ConnectionData(BaseModel):
    connected: bool
    model: str
    available: bool
    error: Optional[str] = None


class StatsData(CamelModel):
    active_sessions: int
    reports_stored: int
