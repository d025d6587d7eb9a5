"""Shared fixtures for the adaptive tutor test suite."""

from __future__ import annotations

import pytest

from adaptive_tutor.domain.entities import UserModel
from adaptive_tutor.domain.enums import Level
from adaptive_tutor.domain.values import (
    EvaluationResult,
    Lesson,
    Quiz,
    QuizQuestion,
    Subtopic,
)
from adaptive_tutor.infrastructure.config import PipelineConfig
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.infrastructure.progress_store import InMemoryProgressStore
from tests.helpers.mock_llm import ScriptedChatModel, calculus_responder

# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user_model() -> UserModel:
    """Calculus beginner with no mastery yet."""
    return UserModel(topic="Calculus", level=Level.BEGINNER, user_id="u1")


@pytest.fixture
def subtopics() -> tuple[Subtopic, ...]:
    return (
        Subtopic(id="s1", name="Functions", prerequisites=()),
        Subtopic(id="s2", name="Limits", prerequisites=("s1",)),
        Subtopic(id="s3", name="Derivatives", prerequisites=("s2",)),
    )


@pytest.fixture
def lesson() -> Lesson:
    return Lesson(
        lesson_id="lesson-1",
        title="Limits",
        subtopic="Limits",
        level="beginner",
        objectives=("Evaluate simple limits",),
        explanation="A limit describes the value a function approaches.",
    )


def _question(i: int, concept: str, correct: int) -> QuizQuestion:
    return QuizQuestion(
        id=f"q{i}",
        concept=concept,
        question=f"Question {i}?",
        options=("a", "b", "c", "d"),
        correct_option_index=correct,
    )


@pytest.fixture
def quiz() -> Quiz:
    """Five questions over two concepts; correct answers [1, 3, 0, 0, 2]."""
    return Quiz(
        quiz_id="quiz-1",
        questions=(
            _question(1, "limit laws", 1),
            _question(2, "one-sided limits", 3),
            _question(3, "limit laws", 0),
            _question(4, "one-sided limits", 0),
            _question(5, "limit laws", 2),
        ),
    )


@pytest.fixture
def evaluation() -> EvaluationResult:
    return EvaluationResult(
        score=3,
        total=5,
        incorrect_concepts=("one-sided limits",),
        updated_mastery={"limit laws": 0.5, "one-sided limits": 0.1},
        recommendations=("Review one-sided limits",),
    )


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig()


@pytest.fixture
def store() -> InMemoryProgressStore:
    return InMemoryProgressStore()


@pytest.fixture
def demo_model() -> ScriptedChatModel:
    """Scripted model answering every stage of the Calculus demo."""
    return ScriptedChatModel(responder=calculus_responder)


@pytest.fixture
def demo_gateway(demo_model: ScriptedChatModel) -> LLMGateway:
    return LLMGateway(demo_model)

