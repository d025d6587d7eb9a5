"""Domain layer: enums, value objects, the plan union, entities and exceptions."""

from adaptive_tutor.domain.entities import UserModel
from adaptive_tutor.domain.enums import CyclePhase, Decision, Difficulty, Level, Purpose
from adaptive_tutor.domain.exceptions import (
    AdaptiveTutorError,
    GatewayError,
    LessonGenerationError,
    NoSubtopicError,
    ParseError,
    PlanningError,
    QuizError,
)
from adaptive_tutor.domain.plans import (
    CurriculumResult,
    PlanResult,
    SubtopicMapResult,
    SubtopicStringResult,
    extract_next_subtopic,
)

__all__ = [
    "UserModel",
    "CyclePhase",
    "Decision",
    "Difficulty",
    "Level",
    "Purpose",
    "AdaptiveTutorError",
    "GatewayError",
    "LessonGenerationError",
    "NoSubtopicError",
    "ParseError",
    "PlanningError",
    "QuizError",
    "CurriculumResult",
    "PlanResult",
    "SubtopicMapResult",
    "SubtopicStringResult",
    "extract_next_subtopic",
]
