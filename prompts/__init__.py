from __future__ import annotations  # Re-export prompt builder API

from .roles import ROLE_DOMAINS, RoleDomain, role_domain
from .templates import (
    EvaluationPromptInput,
    FollowUpPromptInput,
    QuestionPromptInput,
    ReportPromptInput,
    evaluate_answer_prompt,
    follow_up_prompt,
    initial_question_prompt,
    report_prompt,
)

__all__ = [
    "ROLE_DOMAINS",
    "EvaluationPromptInput",
    "FollowUpPromptInput",
    "QuestionPromptInput",
    "ReportPromptInput",
    "RoleDomain",
    "evaluate_answer_prompt",
    "follow_up_prompt",
    "initial_question_prompt",
    "report_prompt",
    "role_domain",
]
