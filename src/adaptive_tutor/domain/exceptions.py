"""Domain exceptions for the adaptive tutor.

All pipeline exceptions inherit from ``AdaptiveTutorError`` so callers can
catch the full family with a single ``except`` clause.  Every exception
records the failing stage in ``details["stage"]`` so the caller can tell
which part of the cycle broke.
"""

from __future__ import annotations

from typing import Any


class AdaptiveTutorError(Exception):
    """Base exception for all adaptive tutor errors."""

    stage: str = ""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}
        self.details.setdefault("stage", self.stage)


class ParseError(AdaptiveTutorError):
    """Raised when no JSON value can be recovered from model output.

    ``original`` is the extracted candidate before repairs and ``repaired``
    the candidate after them.  ``first_error`` / ``second_error`` are the
    messages of the strict and the post-repair parse attempts.
    """

    stage = "parse"

    def __init__(
        self,
        message: str = "Failed to parse model output",
        original: str = "",
        repaired: str = "",
        first_error: str = "",
        second_error: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.original = original
        self.repaired = repaired
        self.first_error = first_error
        self.second_error = second_error


class GatewayError(AdaptiveTutorError):
    """Raised when a model call fails or returns no usable content.

    The upstream message is kept verbatim in ``upstream_message``.
    """

    stage = "gateway"

    def __init__(
        self,
        message: str = "Model call failed",
        purpose: str = "",
        model_id: str = "",
        upstream_message: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.purpose = purpose
        self.model_id = model_id
        self.upstream_message = upstream_message


class PlanningError(AdaptiveTutorError):
    """Raised when a curriculum planning sub-call produces unusable output.

    ``stage`` names the sub-call (``subtopic_map``, ``weakness_analysis``,
    ``curriculum_draft``, ``optimization``, ``validation``).
    """

    def __init__(
        self,
        message: str = "Planning failed",
        stage: str = "planning",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.stage = stage
        super().__init__(message, details)


class LessonGenerationError(AdaptiveTutorError):
    """Raised when the lesson stage cannot produce a structured lesson."""

    stage = "lesson"

    def __init__(
        self,
        message: str = "Lesson generation failed",
        subtopic: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.subtopic = subtopic


class QuizError(AdaptiveTutorError):
    """Raised for malformed quiz generation or evaluation output, or when the
    number of answers does not match the number of questions."""

    stage = "quiz"


class NoSubtopicError(AdaptiveTutorError):
    """Raised when planning produced nothing the cycle can teach next."""

    stage = "select_subtopic"
