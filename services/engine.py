from __future__ import annotations  # Interview turn orchestration

import logging
from typing import Callable, Optional, Tuple

from interview_session import (
    AudioMetadata,
    Evaluation,
    InterviewConfig,
    NoActiveQuestionError,
    Question,
    Report,
    Session,
    SessionCompletedError,
    SessionNotFoundError,
    SessionStore,
    now_ms,
)
from llm_gateway import CamelModel, GeneratedQuestion, LlmGateway
from observability import log_event
from prompts import (
    EvaluationPromptInput,
    FollowUpPromptInput,
    QuestionPromptInput,
    ReportPromptInput,
    evaluate_answer_prompt,
    follow_up_prompt,
    initial_question_prompt,
    report_prompt,
)

from .locks import KeyedLock
from .policy import ContinuationPolicy

logger = logging.getLogger(__name__)


class TurnResult(CamelModel):  # Outcome of one answered question
    evaluation: Evaluation
    next_question: Optional[Question] = None
    should_continue: bool = False


class InterviewEngine:
    """Drives start, answer/evaluate/continue and report for each session."""

    def __init__(
        self,
        gateway: LlmGateway,
        store: SessionStore,
        *,
        policy: Optional[ContinuationPolicy] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.policy = policy or ContinuationPolicy()
        self._clock = clock
        self._locks = KeyedLock()

    async def generate_initial_question(self, config: InterviewConfig) -> GeneratedQuestion:
        logger.info("Generating initial question for %s - %s", config.role, config.level)
        prompt = initial_question_prompt(
            QuestionPromptInput(role=config.role, level=config.level, topics=list(config.topics))
        )
        return await self.gateway.generate_question(prompt)

    async def start_interview(self, config: InterviewConfig) -> Tuple[Session, Question]:
        # Generate first so a provider failure does not leave an orphan session behind.
        generated = await self.generate_initial_question(config)
        session = self.store.create_session(config)
        question = await self.store.add_question(session.session_id, generated)
        return session, question

    def should_continue(self, session: Session) -> bool:
        return self.policy.should_continue(len(session.answers), session.age_ms(self._clock()))

    async def evaluate_and_generate_next(
        self,
        session_id: str,
        answer: str,
        audio_metadata: Optional[AudioMetadata] = None,
    ) -> TurnResult:
        async with self._locks.hold(session_id):
            session = await self.store.get_session(session_id)
            if session.status == "completed":
                raise SessionCompletedError(session_id)
            current = session.current_question()
            if current is None:
                raise NoActiveQuestionError(session_id)

            logger.info("Evaluating answer for session %s", session_id)
            evaluation = await self.gateway.evaluate_answer(
                evaluate_answer_prompt(
                    EvaluationPromptInput(
                        question=current.question,
                        answer=answer,
                        expected_key_points=current.expected_key_points,
                        role=session.config.role,
                    )
                )
            )
            recorded = await self.store.add_answer(
                session_id, current.question_id, answer, evaluation, audio_metadata
            )

            should_continue = self.should_continue(session)
            next_question: Optional[Question] = None
            try:
                if should_continue:
                    next_question = await self._follow_up(session, evaluation.score)
                await self.store.persist_session(session)
            except Exception:
                # Nothing of a turn stays in memory unless its flush succeeded.
                if next_question is not None:
                    await self.store.revert_question(session_id, next_question.question_id)
                await self.store.revert_answer(session_id, recorded.answer_id)
                raise
            log_event(
                "turn_completed",
                session_id,
                score=evaluation.score,
                should_continue=should_continue,
                answers=len(session.answers),
            )
            return TurnResult(
                evaluation=evaluation,
                next_question=next_question,
                should_continue=should_continue,
            )

    async def generate_final_report(self, session_id: str) -> Report:
        async with self._locks.hold(session_id):
            session = await self.store.get_session(session_id)
            if session.status == "completed":
                raise SessionCompletedError(session_id)
            logger.info("Generating final report for session %s", session_id)
            qa_pairs = await self.store.get_qa_pairs(session_id)
            prompt = report_prompt(
                ReportPromptInput(
                    role=session.config.role,
                    level=session.config.level,
                    qa_pairs=qa_pairs,
                    duration_s=self._elapsed_seconds(session),
                )
            )
            report_data = await self.gateway.generate_report(prompt)
            return await self.store.end_session(session_id, report_data, qa_pairs)

    async def session_status(self, session_id: str) -> Session:
        return await self.store.get_session(session_id)

    async def report_with_session(self, report_id: str) -> Tuple[Report, Optional[Session]]:
        report = await self.store.get_report(report_id)
        try:
            session = await self.store.get_session_from_disk(report.session_id)
        except SessionNotFoundError as exc:
            logger.warning("Could not load session for report %s: %s", report_id, exc)
            session = None
        return report, session

    async def _follow_up(self, session: Session, last_score: int) -> Question:
        session_id = session.session_id
        logger.info("Generating follow-up question for session %s", session_id)
        uncovered = await self.store.get_uncovered_topics(session_id)
        prompt = follow_up_prompt(
            FollowUpPromptInput(
                role=session.config.role,
                level=session.config.level,
                history=session.context.conversation_history,
                last_score=last_score,
                topics_covered=list(session.context.topics_covered),
                uncovered_topics=uncovered,
            )
        )
        generated = await self.gateway.generate_question(prompt)
        return await self.store.add_question(session_id, generated)

    def _elapsed_seconds(self, session: Session) -> float:
        if not session.start_time:
            return 0.0
        end = session.end_time or self._clock()
        return max(0.0, (end - session.start_time) / 1000)


__all__ = ["InterviewEngine", "TurnResult"]
