"""Domain enumerations for the adaptive tutor.

These enums capture the fixed vocabularies used across the pipeline:
learner levels, adaptation decisions, problem difficulties, model-routing
purposes, and cycle phases.
"""

from enum import Enum


class Level(Enum):
    """Declared learner level."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Decision(Enum):
    """The four pedagogical actions the decision engine may choose."""

    DRILL = "DRILL"  # more practice on the same topic
    RETEACH = "RETEACH"  # go back to prerequisites
    ADVANCE = "ADVANCE"  # move to the next topic
    REINFORCE = "REINFORCE"  # consolidate current understanding


class Difficulty(Enum):
    """Difficulty of a follow-up practice problem."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Purpose(Enum):
    """Routing key selecting which model profile serves a call."""

    ANALYSIS = "analysis"
    GENERATION = "generation"
    TUTORING = "tutoring"
    MOTIVATION = "motivation"


class CyclePhase(Enum):
    """Terminal phase reported by a learning cycle."""

    QUIZ_READY = "quiz_ready"
    EVALUATION_COMPLETE = "evaluation_complete"
