"""Value objects for the adaptive tutor.

All types here are frozen dataclasses -- immutable, compared by value.
Each stage constructs its own objects and hands them forward by reference;
``to_dict()`` renders the camelCase shape used in prompts and results.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .enums import Decision, Difficulty

# ---------------------------------------------------------------------------
# Curriculum planning
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Subtopic:
    """One entry of a subtopic map.  ``prerequisites`` holds other entries' ids."""

    id: str
    name: str
    prerequisites: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        """Name, falling back to the id when the name is empty."""
        return self.name or self.id

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "prerequisites": list(self.prerequisites)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Subtopic:
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            prerequisites=tuple(str(p) for p in data.get("prerequisites") or ()),
        )


def dangling_prerequisites(subtopics: tuple[Subtopic, ...]) -> dict[str, tuple[str, ...]]:
    """Map subtopic id -> prerequisite ids that reference no entry of the map."""
    known = {s.id for s in subtopics}
    result: dict[str, tuple[str, ...]] = {}
    for s in subtopics:
        missing = tuple(p for p in s.prerequisites if p not in known)
        if missing:
            result[s.id] = missing
    return result


@dataclass(frozen=True)
class WeaknessAnalysis:
    """Classification of concepts after a quiz."""

    weak_concepts: tuple[str, ...] = ()
    strong_concepts: tuple[str, ...] = ()
    critical_failures: tuple[str, ...] = ()
    primary_focus: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "weakConcepts": list(self.weak_concepts),
            "strongConcepts": list(self.strong_concepts),
            "criticalFailures": list(self.critical_failures),
            "primaryFocus": self.primary_focus,
        }


@dataclass(frozen=True)
class CurriculumEntry:
    """One lesson slot of a curriculum draft, optimized, or final sequence."""

    lesson_id: str = ""
    title: str = ""
    subtopic: str = ""
    estimated_time: float = 0
    skills_targeted: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        """Subtopic, falling back to the title."""
        return self.subtopic or self.title

    def to_dict(self) -> dict[str, Any]:
        return {
            "lessonId": self.lesson_id,
            "title": self.title,
            "subtopic": self.subtopic,
            "estimatedTime": self.estimated_time,
            "skillsTargeted": list(self.skills_targeted),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CurriculumEntry:
        raw_time = data.get("estimatedTime", data.get("estimated_time", 0))
        try:
            estimated = float(raw_time or 0)
        except (TypeError, ValueError):
            estimated = 0
        return cls(
            lesson_id=str(data.get("lessonId") or data.get("lesson_id") or ""),
            title=str(data.get("title") or ""),
            subtopic=str(data.get("subtopic") or ""),
            estimated_time=estimated,
            skills_targeted=tuple(
                str(s) for s in data.get("skillsTargeted") or data.get("skills_targeted") or ()
            ),
        )


# ---------------------------------------------------------------------------
# Lesson
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LessonExample:
    """A worked example: a header and its ordered steps."""

    header: str = ""
    steps: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"header": self.header, "steps": list(self.steps)}


@dataclass(frozen=True)
class Lesson:
    """One structured lesson for a subtopic."""

    lesson_id: str
    title: str
    subtopic: str
    level: str
    objectives: tuple[str, ...] = ()
    explanation: str = ""
    examples: tuple[LessonExample, ...] = ()
    mini_check: str = ""
    practice_problems: tuple[str, ...] = ()
    ascii_visual: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "lessonId": self.lesson_id,
            "title": self.title,
            "subtopic": self.subtopic,
            "level": self.level,
            "objectives": list(self.objectives),
            "explanation": self.explanation,
            "examples": [e.to_dict() for e in self.examples],
            "miniCheck": self.mini_check,
            "practiceProblems": list(self.practice_problems),
            "asciiVisual": self.ascii_visual,
        }


# ---------------------------------------------------------------------------
# Quiz
# ---------------------------------------------------------------------------

OPTIONS_PER_QUESTION = 4


@dataclass(frozen=True)
class QuizQuestion:
    """A multiple-choice question with exactly one correct option."""

    id: str
    concept: str
    question: str
    options: tuple[str, ...]
    correct_option_index: int

    def __post_init__(self) -> None:
        if len(self.options) != OPTIONS_PER_QUESTION:
            raise ValueError(
                f"question {self.id!r} must have {OPTIONS_PER_QUESTION} options, "
                f"got {len(self.options)}"
            )
        if not 0 <= self.correct_option_index < OPTIONS_PER_QUESTION:
            raise ValueError(
                f"question {self.id!r} correct_option_index must be in "
                f"[0, {OPTIONS_PER_QUESTION - 1}], got {self.correct_option_index}"
            )

    def is_correct(self, answer: int) -> bool:
        return answer == self.correct_option_index

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "concept": self.concept,
            "question": self.question,
            "options": list(self.options),
            "correctOptionIndex": self.correct_option_index,
        }


@dataclass(frozen=True)
class Quiz:
    """A quiz generated from one lesson."""

    quiz_id: str
    questions: tuple[QuizQuestion, ...]

    @property
    def concepts(self) -> tuple[str, ...]:
        """Distinct concept tags, in question order."""
        return tuple(dict.fromkeys(q.concept for q in self.questions))

    def to_dict(self) -> dict[str, Any]:
        return {
            "quizId": self.quiz_id,
            "questions": [q.to_dict() for q in self.questions],
        }


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of grading a quiz against the learner's answers."""

    score: int
    total: int
    incorrect_concepts: tuple[str, ...] = ()
    updated_mastery: Mapping[str, float] = field(default_factory=dict)
    recommendations: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not 0 <= self.score <= self.total:
            raise ValueError(f"score must be in [0, {self.total}], got {self.score}")

    @property
    def percentage(self) -> float:
        """Score on a 0-100 scale."""
        if self.total == 0:
            return 0.0
        return 100.0 * self.score / self.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "total": self.total,
            "incorrectConcepts": list(self.incorrect_concepts),
            "updatedMastery": dict(self.updated_mastery),
            "recommendations": list(self.recommendations),
        }


# ---------------------------------------------------------------------------
# Adaptation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Problem:
    """A follow-up practice problem."""

    problem: str
    topic: str
    difficulty: Difficulty
    hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "problem": self.problem,
            "topic": self.topic,
            "difficulty": self.difficulty.value,
        }
        if self.hint is not None:
            d["hint"] = self.hint
        return d


@dataclass(frozen=True)
class AdaptationDecision:
    """The decision engine's control output."""

    decision: Decision
    feedback: str
    follow_up_problems: tuple[Problem, ...] = ()
    from_fallback: bool = False

    def with_problems(self, problems: tuple[Problem, ...]) -> AdaptationDecision:
        return AdaptationDecision(
            decision=self.decision,
            feedback=self.feedback,
            follow_up_problems=problems,
            from_fallback=self.from_fallback,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.decision.value,
            "feedback": self.feedback,
            "followUpProblems": [p.to_dict() for p in self.follow_up_problems],
        }


@dataclass(frozen=True)
class AdaptationOutcome:
    """Everything the learning agent produced for one quiz submission."""

    decision: AdaptationDecision
    error_analysis: str
    mastery: float
    score: float
    session_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "decision": self.decision.decision.value,
            "feedback": self.decision.feedback,
            "followUpProblems": [p.to_dict() for p in self.decision.follow_up_problems],
            "errorAnalysis": self.error_analysis,
            "mastery": self.mastery,
            "score": self.score,
            "sessionId": self.session_id,
        }


# ---------------------------------------------------------------------------
# Progress records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QuizAttempt:
    """Append-only record of one graded quiz."""

    user_id: str
    topic: str
    quiz_id: str
    score: float  # percentage
    correct_answers: int
    total_questions: int
    answers: tuple[int, ...] = ()
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class SessionRecord:
    """Append-only record of one adaptation decision."""

    user_id: str
    topic: str
    decision: str
    feedback: str
    follow_up_problems: tuple[Problem, ...] = ()
    rationale: str = ""
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)
