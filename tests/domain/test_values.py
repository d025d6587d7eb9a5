"""Tests for domain value objects."""

from __future__ import annotations

import dataclasses

import pytest

from adaptive_tutor.domain.enums import Decision, Difficulty
from adaptive_tutor.domain.values import (
    AdaptationDecision,
    CurriculumEntry,
    EvaluationResult,
    Problem,
    Quiz,
    QuizQuestion,
    Subtopic,
    dangling_prerequisites,
)


class TestSubtopic:

    def test_label_falls_back_to_id(self) -> None:
        assert Subtopic("s1", "Limits").label == "Limits"
        assert Subtopic("s1", "").label == "s1"

    def test_from_dict(self) -> None:
        s = Subtopic.from_dict({"id": "s2", "name": "Limits", "prerequisites": ["s1"]})
        assert s == Subtopic("s2", "Limits", ("s1",))
        assert s.to_dict() == {"id": "s2", "name": "Limits", "prerequisites": ["s1"]}

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            Subtopic("s1", "x").name = "y"  # type: ignore[misc]

    def test_dangling_prerequisites(self, subtopics: tuple[Subtopic, ...]) -> None:
        assert dangling_prerequisites(subtopics) == {}
        broken = subtopics + (Subtopic("s4", "Integrals", ("s3", "s99")),)
        assert dangling_prerequisites(broken) == {"s4": ("s99",)}


class TestCurriculumEntry:

    def test_label(self) -> None:
        assert CurriculumEntry(title="T", subtopic="S").label == "S"
        assert CurriculumEntry(title="T").label == "T"

    def test_from_dict_tolerates_bad_time(self) -> None:
        entry = CurriculumEntry.from_dict({"title": "T", "estimatedTime": "soon"})
        assert entry.estimated_time == 0


class TestQuizQuestion:

    def test_requires_four_options(self) -> None:
        with pytest.raises(ValueError, match="4 options"):
            QuizQuestion("q1", "c", "?", ("a", "b", "c"), 0)

    def test_correct_index_in_range(self) -> None:
        with pytest.raises(ValueError):
            QuizQuestion("q1", "c", "?", ("a", "b", "c", "d"), 4)

    def test_is_correct(self) -> None:
        q = QuizQuestion("q1", "c", "?", ("a", "b", "c", "d"), 2)
        assert q.is_correct(2)
        assert not q.is_correct(1)


class TestQuiz:

    def test_concepts_are_unique_in_order(self, quiz: Quiz) -> None:
        assert quiz.concepts == ("limit laws", "one-sided limits")

    def test_to_dict(self, quiz: Quiz) -> None:
        d = quiz.to_dict()
        assert d["quizId"] == "quiz-1"
        assert d["questions"][0]["correctOptionIndex"] == 1


class TestEvaluationResult:

    def test_percentage(self, evaluation: EvaluationResult) -> None:
        assert evaluation.percentage == 60.0

    def test_score_bounds(self) -> None:
        with pytest.raises(ValueError):
            EvaluationResult(score=6, total=5)
        with pytest.raises(ValueError):
            EvaluationResult(score=-1, total=5)

    def test_empty_quiz_percentage(self) -> None:
        assert EvaluationResult(score=0, total=0).percentage == 0.0


class TestAdaptationDecision:

    def test_with_problems_keeps_decision(self) -> None:
        decision = AdaptationDecision(Decision.DRILL, "fb", from_fallback=True)
        problem = Problem("p", "t", Difficulty.HARD)
        updated = decision.with_problems((problem,))
        assert updated.decision is Decision.DRILL
        assert updated.from_fallback
        assert updated.follow_up_problems == (problem,)

    def test_to_dict(self) -> None:
        d = AdaptationDecision(
            Decision.REINFORCE, "fb", (Problem("p", "t", Difficulty.MEDIUM),)
        ).to_dict()
        assert d == {
            "type": "REINFORCE",
            "feedback": "fb",
            "followUpProblems": [{"problem": "p", "topic": "t", "difficulty": "medium"}],
        }
