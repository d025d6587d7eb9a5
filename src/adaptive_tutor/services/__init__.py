"""Service layer: the model-backed pipeline stages.

Re-exports public service types for convenient top-level access::

    from adaptive_tutor.services import (
        CurriculumPlanner, LessonGenerator,
        QuizGenerator, QuizEvaluator, calculate_new_mastery,
        ErrorAnalyzer, AdaptiveDecisionEngine, ProblemGenerator,
        LearningAgent,
    )
"""

from adaptive_tutor.services.adaptation import LearningAgent, resolve_prerequisites
from adaptive_tutor.services.decision import (
    AdaptiveDecisionEngine,
    fallback_decision,
    feedback_for,
    parse_decision,
)
from adaptive_tutor.services.diagnosis import ErrorAnalyzer, fallback_analysis
from adaptive_tutor.services.lesson import LessonGenerator
from adaptive_tutor.services.planning import CurriculumPlanner
from adaptive_tutor.services.problems import FALLBACK_PROBLEMS, ProblemGenerator
from adaptive_tutor.services.quiz import QuizEvaluator, QuizGenerator, calculate_new_mastery

__all__ = [
    "LearningAgent",
    "resolve_prerequisites",
    "AdaptiveDecisionEngine",
    "fallback_decision",
    "feedback_for",
    "parse_decision",
    "ErrorAnalyzer",
    "fallback_analysis",
    "LessonGenerator",
    "CurriculumPlanner",
    "FALLBACK_PROBLEMS",
    "ProblemGenerator",
    "QuizEvaluator",
    "QuizGenerator",
    "calculate_new_mastery",
]
