"""Public testing utilities for the adaptive tutor.

Provides scripted chat models for writing self-contained examples and tests
without requiring API keys.
"""

from adaptive_tutor.testing.demo import CORRECT_ANSWERS, calculus_demo_model, calculus_responder
from adaptive_tutor.testing.mock_llm import FailingChatModel, ScriptedChatModel

__all__ = [
    "CORRECT_ANSWERS",
    "FailingChatModel",
    "ScriptedChatModel",
    "calculus_demo_model",
    "calculus_responder",
]
