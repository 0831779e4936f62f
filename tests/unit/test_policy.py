from __future__ import annotations

import pytest

from config import Settings
from services import ContinuationPolicy


@pytest.mark.parametrize("answers", [0, 1, 2])
def test_always_continues_below_minimum(answers):
    policy = ContinuationPolicy()
    assert policy.should_continue(answers, elapsed_ms=10 * 3_600_000) is True


def test_stops_at_maximum():
    policy = ContinuationPolicy()
    assert policy.should_continue(10, elapsed_ms=0) is False
    assert policy.should_continue(12, elapsed_ms=0) is False


def test_stops_after_time_budget_between_limits():
    policy = ContinuationPolicy()
    assert policy.should_continue(5, elapsed_ms=1_800_000) is True
    assert policy.should_continue(5, elapsed_ms=1_800_001) is False


def test_from_settings():
    policy = ContinuationPolicy.from_settings(Settings(MIN_QUESTIONS=2, MAX_QUESTIONS=4, MAX_DURATION_S=60))
    assert (policy.min_answers, policy.max_answers, policy.max_duration_ms) == (2, 4, 60_000)
    assert policy.should_continue(3, elapsed_ms=61_000) is False
