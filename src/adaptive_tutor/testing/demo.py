"""Offline Calculus demo.

``calculus_responder`` answers every prompt the pipeline sends with a valid
canned reply, recognised by the role in the system prompt.  Some replies
are wrapped the way real models wrap them (prose, code fences, trailing
commas) so the tolerant parser is exercised too.

The quiz's correct answers are ``[1, 3, 0, 0, 2]``.
"""

from __future__ import annotations

import json
from typing import Any

from adaptive_tutor.testing.mock_llm import ScriptedChatModel

CORRECT_ANSWERS = [1, 3, 0, 0, 2]

SUBTOPICS = [
    {"id": "s1", "name": "Functions and Graphs", "prerequisites": []},
    {"id": "s2", "name": "Limits", "prerequisites": ["s1"]},
    {"id": "s3", "name": "Continuity", "prerequisites": ["s2"]},
    {"id": "s4", "name": "Derivatives", "prerequisites": ["s2"]},
    {"id": "s5", "name": "Differentiation Rules", "prerequisites": ["s4"]},
    {"id": "s6", "name": "Chain Rule", "prerequisites": ["s5"]},
    {"id": "s7", "name": "Applications of Derivatives", "prerequisites": ["s6"]},
    {"id": "s8", "name": "Integrals", "prerequisites": ["s4"]},
    {"id": "s9", "name": "Fundamental Theorem of Calculus", "prerequisites": ["s8"]},
]

WEAKNESS = {
    "weakConcepts": ["limit laws", "one-sided limits"],
    "strongConcepts": ["limit notation"],
    "criticalFailures": ["limit laws"],
    "primaryFocus": "Limits",
}

CURRICULUM = [
    {
        "lessonId": "L1",
        "title": "Limit Laws Revisited",
        "subtopic": "Limits",
        "estimatedTime": 20,
        "skillsTargeted": ["limit laws"],
    },
    {
        "lessonId": "L2",
        "title": "One-Sided Limits",
        "subtopic": "Continuity",
        "estimatedTime": 15,
        "skillsTargeted": ["one-sided limits"],
    },
]

LESSON = {
    "lessonId": "lesson-functions",
    "title": "Functions and Graphs",
    "subtopic": "Functions and Graphs",
    "level": "beginner",
    "objectives": ["Read a function from its graph", "Evaluate a function at a point"],
    "explanation": "A function assigns exactly one output to every input.",
    "examples": [
        {"header": "Evaluating f(x) = 2x + 1", "steps": ["Substitute x = 3", "2*3 + 1 = 7"]}
    ],
    "miniCheck": "What is f(0) for f(x) = 2x + 1?",
    "practiceProblems": ["Evaluate f(x) = x^2 at x = -2", "Sketch y = |x|"],
    "asciiVisual": "  y\n  |  /\n  | /\n--+------ x",
}

QUIZ = {
    "quizId": "quiz-functions",
    "questions": [
        {
            "id": "q1",
            "concept": "function evaluation",
            "question": "If f(x) = 2x + 1, what is f(3)?",
            "options": ["6", "7", "8", "9"],
            "correctOptionIndex": 1,
        },
        {
            "id": "q2",
            "concept": "domain",
            "question": "Which value is NOT in the domain of f(x) = 1/x?",
            "options": ["1", "-1", "2", "0"],
            "correctOptionIndex": 3,
        },
        {
            "id": "q3",
            "concept": "graph reading",
            "question": "A vertical line crossing a curve twice means the curve is:",
            "options": ["not a function", "a function", "linear", "constant"],
            "correctOptionIndex": 0,
        },
        {
            "id": "q4",
            "concept": "function evaluation",
            "question": "If g(x) = x^2, what is g(-2)?",
            "options": ["4", "-4", "2", "0"],
            "correctOptionIndex": 0,
        },
        {
            "id": "q5",
            "concept": "graph reading",
            "question": "The graph of y = |x| has its vertex at:",
            "options": ["(1, 1)", "(0, 1)", "(0, 0)", "(1, 0)"],
            "correctOptionIndex": 2,
        },
    ],
}

EVALUATION = {
    "updatedMastery": {
        "function evaluation": 0.55,
        "domain": 0.4,
        "graph reading": 0.5,
    },
    "recommendations": ["Review limit laws", "Practice reading graphs"],
}

PROBLEMS = [
    {
        "problem": "A tank fills at f(t) = 3t + 2 litres. How much after 4 minutes?",
        "topic": "function evaluation",
        "difficulty": "medium",
        "hint": "Substitute t = 4",
    },
    {
        "problem": "State the domain of h(x) = sqrt(x - 1).",
        "topic": "domain",
        "difficulty": "medium",
        "hint": "The radicand must be non-negative",
    },
]

ANALYSIS = (
    "The student evaluates functions reliably but confuses domain restrictions. "
    "The pattern is consistent with a gap in reading graphs."
)


def _fenced(payload: Any) -> str:
    return "Here is the result:\n```json\n" + json.dumps(payload, indent=2) + "\n```"


def _trailing_comma(payload: dict[str, Any]) -> str:
    text = json.dumps(payload)
    return text[:-1] + ",}"


# Checked in order; the first marker found in the system prompt wins.
_REPLIES: list[tuple[str, Any]] = [
    ("subject-mapping AI", lambda: _fenced({"subtopics": SUBTOPICS})),
    ("grading and learning analytics AI", lambda: json.dumps(EVALUATION)),
    ("educational analytics AI", lambda: json.dumps(WEAKNESS)),
    ("curriculum designer AI", lambda: json.dumps({"curriculum": CURRICULUM})),
    ("curriculum optimization AI", lambda: _trailing_comma({"optimizedCurriculum": CURRICULUM})),
    (
        "curriculum validation AI",
        lambda: json.dumps({"finalCurriculum": CURRICULUM, "notes": "Critical failures first."}),
    ),
    ("Lesson Generation AI", lambda: _fenced(LESSON)),
    ("Quiz Generation AI", lambda: json.dumps(QUIZ)),
    ("analyzing student quiz performance", lambda: ANALYSIS),
    ("educational decision engine", lambda: "REINFORCE"),
    ("problem generator", lambda: json.dumps({"problems": PROBLEMS})),
]


def calculus_responder(system: str, user: str) -> str:
    """Return the canned reply for the stage that sent *system*."""
    for marker, reply in _REPLIES:
        if marker in system:
            return reply()
    raise ValueError(f"No scripted reply for system prompt: {system[:80]!r}")


def calculus_demo_model() -> ScriptedChatModel:
    """A :class:`ScriptedChatModel` serving the whole Calculus demo."""
    return ScriptedChatModel(responder=calculus_responder)
