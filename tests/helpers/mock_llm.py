"""Mock LLM for testing: re-exports from ``adaptive_tutor.testing``."""

from __future__ import annotations

from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.testing.demo import CORRECT_ANSWERS, calculus_responder
from adaptive_tutor.testing.mock_llm import FailingChatModel, ScriptedChatModel


def scripted_gateway(*responses: object) -> tuple[LLMGateway, ScriptedChatModel]:
    """Gateway over a model replaying *responses* in order."""
    model = ScriptedChatModel(responses=list(responses))
    return LLMGateway(model), model


__all__ = [
    "CORRECT_ANSWERS",
    "FailingChatModel",
    "ScriptedChatModel",
    "calculus_responder",
    "scripted_gateway",
]
