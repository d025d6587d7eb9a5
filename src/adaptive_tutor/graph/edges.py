"""Conditional edge functions for the learning-cycle graph."""

from __future__ import annotations

from typing import Any, Literal


def route_entry(state: dict[str, Any]) -> Literal["plan", "restore"]:
    """Start a fresh cycle, or resume from a quiz the learner already saw.

    Resuming needs both a previous quiz-ready result and answers to grade.
    """
    if state.get("previous") is not None and state.get("answers") is not None:
        return "restore"
    return "plan"


def route_after_quiz(state: dict[str, Any]) -> Literal["evaluate", "__end__"]:
    """Stop at the quiz unless answers were supplied."""
    if state.get("answers") is None:
        return "__end__"
    return "evaluate"
