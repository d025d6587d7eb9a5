"""Adaptive Tutor.

LLM-orchestrated adaptive learning pipeline: curriculum planning, lesson and
quiz generation, grading, and an adaptive decision loop, sequenced as a
LangGraph state graph over a purpose-routed model gateway.
"""

__version__ = "0.1.0"

from adaptive_tutor.agents import (
    CycleOrchestrator,
    EvaluationCompleteResult,
    QuizReadyResult,
)
from adaptive_tutor.domain import UserModel
from adaptive_tutor.infrastructure.llm import LLMGateway

__all__ = [
    "CycleOrchestrator",
    "EvaluationCompleteResult",
    "QuizReadyResult",
    "UserModel",
    "LLMGateway",
]
