from __future__ import annotations  # Interview session aggregate models

import time
from typing import List, Literal, Optional, get_args

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from llm_gateway.schemas import CamelModel, GeneratedEvaluation, GeneratedQuestion, GeneratedReport

Level = Literal["Junior", "Mid-level", "Senior", "Lead", "Principal"]
LEVELS = get_args(Level)
SessionStatus = Literal["active", "completed"]


def now_ms() -> int:  # Epoch milliseconds, the timestamp unit used on disk and on the wire
    return int(time.time() * 1000)


class InterviewConfig(CamelModel):  # Immutable interview setup
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    role: str
    level: Level
    topics: List[str] = Field(min_length=1, max_length=5)


class SessionContext(CamelModel):  # Rolling state fed back into prompts
    conversation_history: str = ""
    topics_covered: List[str] = Field(default_factory=list)
    difficulty_progression: List[int] = Field(default_factory=list)


class Question(GeneratedQuestion):  # Question issued within a session
    question_id: str
    asked_at: int


Evaluation = GeneratedEvaluation


class AudioMetadata(CamelModel):  # Client-side speech capture stats
    duration: Optional[float] = None
    pause_count: Optional[float] = None
    average_confidence: Optional[float] = None


class Answer(CamelModel):  # Evaluated answer to one question
    answer_id: str
    question_id: str
    transcription: str
    evaluation: Evaluation
    submitted_at: int
    audio_metadata: Optional[AudioMetadata] = None


class QAPair(CamelModel):  # Denormalized question/answer row used in reports
    question: str
    answer: str
    score: int
    feedback: str


class Session(CamelModel):  # Root aggregate for one interview
    session_id: str
    config: InterviewConfig
    status: SessionStatus = "active"
    start_time: int
    end_time: Optional[int] = None
    questions: List[Question] = Field(default_factory=list)
    answers: List[Answer] = Field(default_factory=list)
    current_question_index: int = Field(default=0, ge=0)
    context: SessionContext = Field(default_factory=SessionContext)

    def current_question(self) -> Optional[Question]:
        """Return the issued question still waiting for an answer, if any."""
        if self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    def question_by_id(self, question_id: str) -> Optional[Question]:
        return next((item for item in self.questions if item.question_id == question_id), None)

    def age_ms(self, now: int) -> int:
        return now - self.start_time

    def duration_seconds(self) -> Optional[int]:
        if self.end_time is None or not self.start_time:
            return None
        return round((self.end_time - self.start_time) / 1000)


class Report(GeneratedReport):  # Final scored report, immutable once stored
    report_id: str
    session_id: str
    qa_pairs: List[QAPair] = Field(default_factory=list)
    generated_at: int


__all__ = [
    "Answer",
    "AudioMetadata",
    "Evaluation",
    "InterviewConfig",
    "LEVELS",
    "Level",
    "QAPair",
    "Question",
    "Report",
    "Session",
    "SessionContext",
    "SessionStatus",
    "now_ms",
]
