from __future__ import annotations  # Session and report persistence layer

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
from uuid import uuid4

from pydantic import ValidationError

from llm_gateway.schemas import GeneratedQuestion, GeneratedReport
from observability import log_event

from .errors import (
    PersistenceError,
    ReportNotFoundError,
    SessionCompletedError,
    SessionExpiredError,
    SessionNotFoundError,
)
from .models import (
    Answer,
    AudioMetadata,
    Evaluation,
    InterviewConfig,
    QAPair,
    Question,
    Report,
    Session,
    now_ms,
)

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 3
DEFAULT_MAX_SESSION_AGE_MS = 7_200_000
DEFAULT_RETENTION_S = 600.0


class SessionStore:  # Write-through memory cache over one JSON file per aggregate
    def __init__(
        self,
        sessions_dir: Union[str, Path],
        *,
        max_session_age_ms: int = DEFAULT_MAX_SESSION_AGE_MS,
        retention_s: float = DEFAULT_RETENTION_S,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._dir = Path(sessions_dir)
        self._max_age_ms = max_session_age_ms
        self._retention_s = retention_s
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._reports: Dict[str, Report] = {}
        self._evictions: Dict[str, asyncio.TimerHandle] = {}

    @property
    def sessions_dir(self) -> Path:
        return self._dir

    def create_session(self, config: InterviewConfig) -> Session:  # Memory only until the first flush
        session = Session(session_id=str(uuid4()), config=config, start_time=self._clock())
        self._sessions[session.session_id] = session
        logger.info("Created session: %s", session.session_id)
        log_event("session_created", session.session_id, role=config.role, level=config.level)
        return session

    async def get_session(self, session_id: str) -> Session:
        session = self.load_from_cache(session_id)
        if session is not None:
            return session
        return await self.load_from_disk_and_cache(session_id)

    def load_from_cache(self, session_id: str) -> Optional[Session]:
        """Return the cached session, evicting it when older than the max age."""

        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._expired(session):
            self._evict(session_id)
            raise SessionExpiredError(session_id)
        return session

    async def load_from_disk_and_cache(self, session_id: str) -> Session:
        """Restore a session written by an earlier process and re-cache it."""

        data = await asyncio.to_thread(_read_json, self._session_path(session_id))
        if data is None:
            raise SessionNotFoundError(session_id)
        try:
            session = Session.model_validate(data)
        except ValidationError as exc:
            logger.error("Session file for %s is unreadable: %s", session_id, exc)
            raise SessionNotFoundError(session_id) from exc
        if self._expired(session):
            raise SessionExpiredError(session_id)
        self._sessions[session_id] = session
        if session.status == "completed":
            # The sweep skips completed sessions; only the retention timer drops them.
            self._schedule_eviction(session_id)
        logger.info("Restored session from disk: %s", session_id)
        return session

    async def add_question(self, session_id: str, question: GeneratedQuestion) -> Question:
        session = await self.get_session(session_id)
        stored = Question(
            question_id=str(uuid4()),
            asked_at=self._clock(),
            **question.model_dump(),
        )
        session.questions.append(stored)
        session.context.difficulty_progression.append(stored.difficulty)
        log_event(
            "question_added",
            session_id,
            question_id=stored.question_id,
            difficulty=stored.difficulty,
        )
        return stored

    async def add_answer(
        self,
        session_id: str,
        question_id: str,
        transcription: str,
        evaluation: Union[Evaluation, Dict[str, Any]],
        audio_metadata: Optional[AudioMetadata] = None,
    ) -> Answer:
        session = await self.get_session(session_id)
        if not isinstance(evaluation, Evaluation):
            evaluation = Evaluation.model_validate(evaluation)
        answer = Answer(
            answer_id=str(uuid4()),
            question_id=question_id,
            transcription=transcription,
            evaluation=evaluation,
            submitted_at=self._clock(),
            audio_metadata=audio_metadata,
        )
        session.answers.append(answer)
        session.current_question_index += 1
        _refresh_context(session)
        logger.info("Added answer to session %s, score: %d", session_id, evaluation.score)
        log_event(
            "answer_recorded",
            session_id,
            answer_id=answer.answer_id,
            score=evaluation.score,
            answers=len(session.answers),
        )
        return answer

    async def revert_answer(self, session_id: str, answer_id: str) -> bool:
        """Undo the latest answer when the rest of its turn failed."""

        session = await self.get_session(session_id)
        if not session.answers or session.answers[-1].answer_id != answer_id:
            return False
        session.answers.pop()
        session.current_question_index -= 1
        _refresh_context(session)
        logger.warning("Reverted answer %s on session %s", answer_id, session_id)
        log_event("answer_reverted", session_id, answer_id=answer_id)
        return True

    async def revert_question(self, session_id: str, question_id: str) -> bool:
        """Withdraw the latest issued question when its turn could not be stored."""

        session = await self.get_session(session_id)
        if not session.questions or session.questions[-1].question_id != question_id:
            return False
        session.questions.pop()
        if session.context.difficulty_progression:
            session.context.difficulty_progression.pop()
        _refresh_context(session)
        logger.warning("Withdrew question %s on session %s", question_id, session_id)
        log_event("question_reverted", session_id, question_id=question_id)
        return True

    async def get_uncovered_topics(self, session_id: str) -> List[str]:
        session = await self.get_session(session_id)
        covered = [item.lower() for item in session.context.topics_covered]
        return [
            topic
            for topic in session.config.topics
            if not any(topic.lower() in tag for tag in covered)
        ]

    async def get_qa_pairs(self, session_id: str) -> List[QAPair]:
        session = await self.get_session(session_id)
        return _qa_pairs(session)

    async def end_session(
        self,
        session_id: str,
        report_data: GeneratedReport,
        qa_pairs: Optional[List[QAPair]] = None,
    ) -> Report:
        """Complete the session and store its report.

        Both files are written before anything becomes visible in memory, so a
        failed write leaves the session active and no report retrievable.
        """

        session = await self.get_session(session_id)
        if session.status == "completed":
            raise SessionCompletedError(session_id)
        ended_at = self._clock()
        completed = session.model_copy(update={"status": "completed", "end_time": ended_at}, deep=True)
        report = Report(
            report_id=str(uuid4()),
            session_id=session_id,
            qa_pairs=list(qa_pairs) if qa_pairs is not None else _qa_pairs(session),
            generated_at=ended_at,
            **report_data.model_dump(include=set(GeneratedReport.model_fields)),
        )
        await self.persist_session(completed)
        await self.persist_report(report)
        self._sessions[session_id] = completed
        self._reports[report.report_id] = report
        self._schedule_eviction(session_id)
        logger.info("Session ended: %s, Report: %s", session_id, report.report_id)
        log_event("session_ended", session_id, report_id=report.report_id, answers=len(completed.answers))
        return report

    async def get_report(self, report_id: str) -> Report:
        cached = self._reports.get(report_id)
        if cached is not None:
            return cached
        data = await asyncio.to_thread(_read_json, self._report_path(report_id))
        if data is None:
            raise ReportNotFoundError(report_id)
        try:
            report = Report.model_validate(data)
        except ValidationError as exc:
            logger.error("Report file for %s is unreadable: %s", report_id, exc)
            raise ReportNotFoundError(report_id) from exc
        self._reports[report_id] = report
        logger.info("Loaded report from disk: %s", report_id)
        return report

    async def get_session_from_disk(self, session_id: str) -> Session:
        """Memory-first read that ignores age, for report enrichment."""

        cached = self._sessions.get(session_id)
        if cached is not None:
            return cached
        data = await asyncio.to_thread(_read_json, self._session_path(session_id))
        if data is None:
            raise SessionNotFoundError(session_id)
        try:
            return Session.model_validate(data)
        except ValidationError as exc:
            raise SessionNotFoundError(session_id) from exc

    async def persist_session(self, session: Session) -> Path:
        path = self._session_path(session.session_id)
        await self._persist(path, session.model_dump(mode="json", by_alias=True))
        logger.info("Persisted session to disk: %s", session.session_id)
        return path

    async def persist_report(self, report: Report) -> Path:
        path = self._report_path(report.report_id)
        await self._persist(path, report.model_dump(mode="json", by_alias=True))
        logger.info("Persisted report to disk: %s", report.report_id)
        return path

    def cleanup_expired(self) -> int:
        """Evict cached active sessions past the max age. Disk files are kept."""

        removed = 0
        for session_id, session in list(self._sessions.items()):
            if session.status == "active" and self._expired(session):
                self._evict(session_id)
                removed += 1
        if removed:
            logger.info("Cleaned up %d expired sessions", removed)
            log_event("cleanup", "-", removed=removed)
        return removed

    async def run_cleanup(self, interval_s: float) -> None:
        while True:
            await asyncio.sleep(interval_s)
            self.cleanup_expired()

    def stats(self) -> Dict[str, int]:
        return {"activeSessions": len(self._sessions), "reportsStored": len(self._reports)}

    def close(self) -> None:
        for handle in self._evictions.values():
            handle.cancel()
        self._evictions.clear()

    def _expired(self, session: Session) -> bool:
        return session.age_ms(self._clock()) > self._max_age_ms

    def _evict(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        handle = self._evictions.pop(session_id, None)
        if handle is not None:
            handle.cancel()

    def _schedule_eviction(self, session_id: str) -> None:
        loop = asyncio.get_running_loop()
        previous = self._evictions.pop(session_id, None)
        if previous is not None:
            previous.cancel()
        self._evictions[session_id] = loop.call_later(self._retention_s, self._evict_completed, session_id)

    def _evict_completed(self, session_id: str) -> None:
        self._evictions.pop(session_id, None)
        if self._sessions.pop(session_id, None) is not None:
            logger.info("Removed completed session from memory: %s", session_id)
            log_event("session_evicted", session_id, reason="retention")

    async def _persist(self, path: Path, payload: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(_write_json, path, payload)
        except OSError as exc:
            logger.error("Failed to persist %s: %s", path.name, exc)
            raise PersistenceError(f"Failed to persist {path.name}: {exc}") from exc

    def _session_path(self, session_id: str) -> Path:
        return self._dir / f"session-{session_id}.json"

    def _report_path(self, report_id: str) -> Path:
        return self._dir / f"report-{report_id}.json"


def _refresh_context(session: Session) -> None:  # Rebuild rolling history and covered topics
    pairs: List[str] = []
    for answer in session.answers[-HISTORY_WINDOW:]:
        question = session.question_by_id(answer.question_id)
        if question is None:
            continue
        pairs.append(
            f"Q: {question.question}\nA: {answer.transcription}\nScore: {answer.evaluation.score}/100"
        )
    session.context.conversation_history = "\n\n".join(pairs)
    covered: List[str] = []
    for question in session.questions:
        if question.type and question.type not in covered:
            covered.append(question.type)
    session.context.topics_covered = covered


def _qa_pairs(session: Session) -> List[QAPair]:
    pairs: List[QAPair] = []
    for answer in session.answers:
        question = session.question_by_id(answer.question_id)
        pairs.append(
            QAPair(
                question=question.question if question else "Unknown question",
                answer=answer.transcription,
                score=answer.evaluation.score,
                feedback=answer.evaluation.feedback,
            )
        )
    return pairs


def _write_json(path: Path, payload: Dict[str, Any]) -> None:  # Atomic replace so readers never see half a file
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise


def _read_json(path: Path) -> Optional[Dict[str, Any]]:
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read %s: %s", path.name, exc)
        return None
    return data if isinstance(data, dict) else None


__all__ = ["SessionStore"]
