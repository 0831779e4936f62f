from __future__ import annotations

import asyncio

import pytest

from fakes import ScriptedGateway, default_responder
from interview_session import (
    InterviewConfig,
    NoActiveQuestionError,
    PersistenceError,
    SessionCompletedError,
    SessionStore,
)
from interview_session import store as store_module
from llm_gateway import ProviderUnavailableError
from services import InterviewEngine

CONFIG = InterviewConfig(role="Backend Developer", level="Mid-level", topics=["REST", "Databases"])
ANSWER = "Tokens are signed so the server can verify claims."


class Clock:
    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now


def _engine(sessions_dir, responder=default_responder, clock=None):
    clock = clock or Clock()
    store = SessionStore(sessions_dir, clock=clock)
    gateway = ScriptedGateway(responder)
    return InterviewEngine(gateway, store, clock=clock), gateway, clock


def test_start_interview_issues_first_question(sessions_dir):
    engine, gateway, _ = _engine(sessions_dir)
    session, question = asyncio.run(engine.start_interview(CONFIG))
    assert session.questions == [question]
    assert session.current_question() == question
    assert gateway.prompts[0][0].startswith("You are an expert interviewer")


def test_start_failure_leaves_no_session(sessions_dir):
    def down(_prompt):
        raise ProviderUnavailableError("Cannot connect to ollama.")

    engine, _, _ = _engine(sessions_dir, down)
    with pytest.raises(ProviderUnavailableError):
        asyncio.run(engine.start_interview(CONFIG))
    assert engine.store.stats()["activeSessions"] == 0


def test_question_answer_counts_stay_in_step(sessions_dir):
    engine, _, _ = _engine(sessions_dir)

    async def main():
        session, _ = await engine.start_interview(CONFIG)
        flags = []
        for _ in range(10):
            result = await engine.evaluate_and_generate_next(session.session_id, ANSWER)
            answers, questions = len(session.answers), len(session.questions)
            assert answers <= questions <= answers + 1
            assert (result.next_question is not None) == result.should_continue
            flags.append(result.should_continue)
        return session, flags

    session, flags = asyncio.run(main())
    assert flags == [True] * 9 + [False]
    assert len(session.answers) == 10
    assert len(session.questions) == 10
    assert session.current_question() is None


def test_time_budget_stops_after_minimum(sessions_dir):
    engine, _, clock = _engine(sessions_dir)

    async def main():
        session, _ = await engine.start_interview(CONFIG)
        results = []
        for _ in range(3):
            clock.now += 11 * 60 * 1000
            results.append(await engine.evaluate_and_generate_next(session.session_id, ANSWER))
        return results

    results = asyncio.run(main())
    # Only the third answer lands past the 30 minute budget.
    assert [r.should_continue for r in results] == [True, True, False]


def test_follow_up_failure_reverts_answer(sessions_dir):
    state = {"fail": False}

    def responder(prompt):
        if state["fail"] and prompt.startswith("You are continuing"):
            raise ProviderUnavailableError("Cannot connect to ollama.")
        return default_responder(prompt)

    engine, _, _ = _engine(sessions_dir, responder)

    async def main():
        session, first = await engine.start_interview(CONFIG)
        state["fail"] = True
        with pytest.raises(ProviderUnavailableError):
            await engine.evaluate_and_generate_next(session.session_id, ANSWER)
        assert session.answers == []
        assert session.current_question() == first
        state["fail"] = False
        result = await engine.evaluate_and_generate_next(session.session_id, ANSWER)
        assert result.should_continue is True
        return session

    session = asyncio.run(main())
    assert len(session.answers) == 1
    assert len(session.questions) == 2


def test_concurrent_answers_are_serialised(sessions_dir):
    engine, _, _ = _engine(sessions_dir)

    async def main():
        session, _ = await engine.start_interview(CONFIG)
        await asyncio.gather(
            engine.evaluate_and_generate_next(session.session_id, ANSWER),
            engine.evaluate_and_generate_next(session.session_id, ANSWER),
        )
        return session

    session = asyncio.run(main())
    assert len(session.answers) == 2
    assert len(session.questions) == 3
    assert session.answers[0].question_id != session.answers[1].question_id


def test_no_active_question_after_final_turn(sessions_dir):
    engine, _, _ = _engine(sessions_dir)

    async def main():
        session, _ = await engine.start_interview(CONFIG)
        for _ in range(10):
            await engine.evaluate_and_generate_next(session.session_id, ANSWER)
        with pytest.raises(NoActiveQuestionError):
            await engine.evaluate_and_generate_next(session.session_id, ANSWER)

    asyncio.run(main())


def test_final_report_uses_elapsed_time(sessions_dir):
    engine, gateway, clock = _engine(sessions_dir)

    async def main():
        session, _ = await engine.start_interview(CONFIG)
        await engine.evaluate_and_generate_next(session.session_id, ANSWER)
        clock.now += 10 * 60 * 1000
        report = await engine.generate_final_report(session.session_id)
        with pytest.raises(SessionCompletedError):
            await engine.generate_final_report(session.session_id)
        with pytest.raises(SessionCompletedError):
            await engine.evaluate_and_generate_next(session.session_id, ANSWER)
        found, summary_source = await engine.report_with_session(report.report_id)
        engine.store.close()
        return report, found, summary_source

    report, found, session = asyncio.run(main())
    report_prompt = next(p for p, _ in gateway.prompts if p.startswith("Generate a comprehensive"))
    assert "- Duration: 10 minutes" in report_prompt
    assert "- Questions Asked: 1" in report_prompt
    assert found is report
    assert session is not None and session.status == "completed"
    assert len(report.qa_pairs) == 1


def test_failed_flush_withdraws_answer_and_next_question(sessions_dir, monkeypatch):
    engine, _, _ = _engine(sessions_dir)
    real_write = store_module._write_json

    def broken_write(path, payload):
        raise OSError("disk full")

    async def main():
        session, first = await engine.start_interview(CONFIG)
        monkeypatch.setattr(store_module, "_write_json", broken_write)
        with pytest.raises(PersistenceError):
            await engine.evaluate_and_generate_next(session.session_id, ANSWER)
        assert session.answers == []
        assert session.questions == [first]
        assert session.context.difficulty_progression == [first.difficulty]
        assert session.current_question() == first

        monkeypatch.setattr(store_module, "_write_json", real_write)
        result = await engine.evaluate_and_generate_next(session.session_id, ANSWER)
        assert result.should_continue is True
        return session, first

    session, first = asyncio.run(main())
    assert session.answers[0].question_id == first.question_id
    assert len(session.questions) == 2
