from __future__ import annotations  # Prompt templates for the interview LLM tasks

import json
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, Field

from interview_session.models import Level, QAPair

from .roles import RoleDomain, role_domain

JSON_ONLY = "CRITICAL: You MUST respond with ONLY valid JSON. No other text."


class QuestionPromptInput(BaseModel):  # Inputs for the opening question
    role: str
    level: Level
    topics: List[str] = Field(min_length=1)


class EvaluationPromptInput(BaseModel):  # Inputs for scoring one answer
    question: str
    answer: str
    expected_key_points: List[str] = Field(default_factory=list)
    role: str


class FollowUpPromptInput(BaseModel):  # Inputs for the next question
    role: str
    level: Level
    history: str = ""
    last_score: int = Field(ge=0, le=100)
    topics_covered: List[str] = Field(default_factory=list)
    uncovered_topics: List[str] = Field(default_factory=list)


class ReportPromptInput(BaseModel):  # Inputs for the final report
    role: str
    level: Level
    qa_pairs: List[QAPair] = Field(default_factory=list)
    duration_s: float = Field(default=0.0, ge=0.0)


QUESTION_EXAMPLE: Dict[str, Any] = {
    "question": "Your SHORT interview question here (1-2 sentences max)",
    "type": "technical",
    "difficulty": 3,
    "expectedKeyPoints": ["key point 1", "key point 2", "key point 3"],
}

EVALUATION_EXAMPLE: Dict[str, Any] = {
    "score": 60,
    "feedback": "Brief honest feedback",
    "strengths": ["strength1", "strength2"],
    "improvements": ["improve1", "improve2"],
    "keyPointsCovered": ["point1"],
}


def _schema(example: Dict[str, Any]) -> str:
    return json.dumps(example, indent=2)


def _examples(rd: RoleDomain) -> str:
    return "\n".join(f'- "{example}"' for example in rd.examples)


def _difficulty_instruction(last_score: int) -> str:
    if last_score >= 80:
        return "- The candidate did well. INCREASE difficulty or go deeper."
    if last_score >= 60:
        return "- The candidate showed decent understanding. MAINTAIN current difficulty."
    return "- The candidate struggled. Ask a SIMPLER question to assess fundamentals."


def _join(items: Sequence[str]) -> str:
    return ", ".join(items)


def initial_question_prompt(data: QuestionPromptInput) -> str:
    rd = role_domain(data.role)
    topics = _join(data.topics)
    lines = [
        f"You are an expert interviewer conducting a {data.level} level interview for a {data.role} position.",
        f"Your domain: {rd.domain}.",
        "",
        "Context:",
        f"- Role: {data.role}",
        f"- Experience Level: {data.level}",
        f"- Focus Topics: {topics}",
        f"- Allowed Scope: {rd.scope}",
        "",
        "STRICT DOMAIN RULES:",
        f"- ONLY ask questions about: {rd.scope}",
        f"- {rd.forbidden}",
        f"- Choose your question topic from: {topics}",
        "",
        "QUESTION REQUIREMENTS:",
        "1. Ask a SHORT, FOCUSED question (1-2 sentences max)",
        "2. ONE clear topic only",
        f"3. Appropriate difficulty for {data.level} level",
        "4. Can be answered in 1-2 minutes",
        "5. No compound questions",
        "",
        f"EXAMPLES OF GOOD QUESTIONS FOR {data.role.upper()}:",
        _examples(rd),
        "",
        JSON_ONLY,
        "",
        _schema(QUESTION_EXAMPLE),
    ]
    return "\n".join(lines)


def evaluate_answer_prompt(data: EvaluationPromptInput) -> str:
    rd = role_domain(data.role)
    lines = [
        f"You are evaluating an answer in a {data.role} interview.",
        f"Domain: {rd.domain}.",
        "",
        f'Question: "{data.question}"',
        f"Expected: {_join(data.expected_key_points)}",
        f'Answer: "{data.answer}"',
        "",
        "SCORING RULES (IMPORTANT):",
        "1. If answer is WRONG or talks about something else = 0-20",
        "2. If answer is too vague or lacks details = 30-50",
        "3. If answer is partially correct but incomplete = 55-70",
        "4. If answer is mostly correct with good details = 70-85",
        "5. If answer is excellent and comprehensive = 85-100",
        "",
        "CHECK: Does the answer actually address the question?",
        "- If NO → score must be 0-25",
        "- If answer is off-topic → score must be 0-15",
        "- Fluent or confident wording does not raise the score of a non-responsive answer.",
        "",
        f"Evaluate strictly within the {rd.domain} context. "
        f"Assess whether the candidate demonstrates real {data.role} knowledge.",
        "",
        "Return ONLY JSON:",
        _schema(EVALUATION_EXAMPLE),
    ]
    return "\n".join(lines)


def follow_up_prompt(data: FollowUpPromptInput) -> str:
    rd = role_domain(data.role)
    if data.uncovered_topics:
        uncovered_line = f"Topics Not Yet Covered: {_join(data.uncovered_topics)}"
        topic_instruction = f"- Explore one of these uncovered topics: {' or '.join(data.uncovered_topics[:2])}"
    else:
        uncovered_line = ""
        topic_instruction = "- Deepen the current topic with a follow-up."
    example = dict(QUESTION_EXAMPLE, question="Your SHORT follow-up question here (1-2 sentences max)", difficulty=4)
    lines = [
        f"You are continuing a {data.level} level interview for a {data.role} position.",
        f"Your domain: {rd.domain}.",
        "",
        "Recent Conversation:",
        data.history,
        "",
        f"Last Answer Score: {data.last_score}/100",
        "",
        f"Topics Already Covered: {_join(data.topics_covered)}",
        uncovered_line,
        "",
        "STRICT DOMAIN RULES:",
        f"- ONLY ask questions about: {rd.scope}",
        f"- {rd.forbidden}",
        f"- Stay within the {data.role} domain. Do NOT cross into other roles.",
        "",
        "Instructions for Next Question:",
        _difficulty_instruction(data.last_score),
        topic_instruction,
        "",
        "QUESTION REQUIREMENTS:",
        "1. Ask a SHORT, FOCUSED question (1-2 sentences max)",
        f"2. ONE clear topic only, from the {data.role} domain",
        "3. No compound or multi-part questions",
        "4. Direct and simple phrasing",
        "5. Can be answered in 1-2 minutes",
        "",
        f"EXAMPLES OF GOOD QUESTIONS FOR {data.role.upper()}:",
        _examples(rd),
        "",
        JSON_ONLY,
        "",
        _schema(example),
    ]
    return "\n".join(lines)


def report_prompt(data: ReportPromptInput) -> str:
    rd = role_domain(data.role)
    history = "\n".join(
        f"Q{index}: {pair.question}\nA{index}: {pair.answer}\nScore: {pair.score}/100\n"
        for index, pair in enumerate(data.qa_pairs, start=1)
    )
    example = {
        "overallScore": 78,
        "summary": f"A 3-4 sentence paragraph summarizing the candidate's overall performance as a {data.role}.",
        "categoryScores": {"technical": 80, "communication": 75, "problemSolving": 78},
        "strengths": [
            "Specific strength with example from interview",
            "Another specific strength with example",
            "Third specific strength with example",
        ],
        "improvements": [
            "Specific area to improve with actionable advice",
            "Another area with concrete suggestion",
            "Third area with clear next step",
        ],
        "recommendations": [
            "Actionable recommendation 1",
            "Actionable recommendation 2",
            "Actionable recommendation 3",
        ],
    }
    lines = [
        f"Generate a comprehensive interview performance report for a {data.role} candidate.",
        f"Domain evaluated: {rd.domain}.",
        "",
        "Interview Details:",
        f"- Role: {data.role}",
        f"- Level: {data.level}",
        f"- Duration: {int(data.duration_s / 60 + 0.5)} minutes",
        f"- Questions Asked: {len(data.qa_pairs)}",
        "",
        "Complete Q&A History:",
        history,
        "",
        "Your Task:",
        f"Analyze the candidate's performance specifically as a {data.role}. Provide:",
        "1. An overall score (0-100) representing interview performance",
        f"2. A summary paragraph (3-4 sentences) describing overall performance as a {data.role}",
        "3. Category scores for: technical depth, communication clarity, problem-solving approach",
        "4. Exactly 3 specific strengths demonstrated",
        "5. Exactly 3 specific areas for improvement",
        f"6. Exactly 3 actionable recommendations for next steps as a {data.role}",
        "",
        f"Be fair, specific, and constructive. Frame feedback in the context of the {data.role} role.",
        "",
        JSON_ONLY,
        "",
        _schema(example),
    ]
    return "\n".join(lines)


__all__ = [
    "EvaluationPromptInput",
    "FollowUpPromptInput",
    "QuestionPromptInput",
    "ReportPromptInput",
    "evaluate_answer_prompt",
    "follow_up_prompt",
    "initial_question_prompt",
    "report_prompt",
]
