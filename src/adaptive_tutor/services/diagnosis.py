"""Error analysis of a graded quiz.

Produces a short free-text diagnosis that feeds the decision engine.  If
the model call fails or returns nothing, a canned analysis keyed on the
score band is returned instead.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from langchain_core.prompts import ChatPromptTemplate

from adaptive_tutor.domain.enums import Purpose
from adaptive_tutor.domain.exceptions import GatewayError
from adaptive_tutor.domain.values import QuizAttempt
from adaptive_tutor.infrastructure.config import PipelineConfig
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.services.base import render_prompt, round_half_up, to_percent, to_prompt_json

logger = logging.getLogger(__name__)

_ANALYSIS_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are an expert AI tutor analyzing student quiz performance. "
            "Identify specific learning gaps and patterns.",
        ),
        (
            "human",
            "Quiz Results:\n"
            "- Score: {score}/100\n"
            "- Student answers: {answers}\n"
            "- Recent performance: {recent}\n"
            "- Current mastery: {mastery_pct}%\n\n"
            "ANALYZE:\n"
            "1. What specific concepts did the student struggle with?\n"
            "2. What patterns do you see in the errors?\n"
            "3. Are there prerequisite knowledge gaps?\n"
            "4. Is this a one-time mistake or a consistent pattern?\n\n"
            "Be concise and actionable. Focus on what to teach next.",
        ),
    ]
)


def fallback_analysis(score: float) -> str:
    """Canned analysis for a quiz scored *score* percent."""
    if score < 50:
        return (
            "Student scored below 50%. Significant gaps in this topic detected. "
            "Recommend reteaching fundamentals."
        )
    if score < 70:
        return (
            "Student scored between 50-70%. Mixed understanding. "
            "Recommend targeted practice on weak areas."
        )
    return "Student performed well. Ready for advanced topics or consolidation."


class ErrorAnalyzer:
    """Diagnoses error patterns from the latest score and recent history."""

    def __init__(self, gateway: LLMGateway, config: PipelineConfig | None = None) -> None:
        self.gateway = gateway
        self.config = config or PipelineConfig()

    async def analyze(
        self,
        score: float,
        answers: Sequence[int],
        recent_attempts: Sequence[QuizAttempt],
        mastery: float,
    ) -> str:
        system, user = render_prompt(
            _ANALYSIS_PROMPT,
            score=round_half_up(score),
            answers=to_prompt_json(list(answers)),
            recent=", ".join(f"{round_half_up(a.score)}%" for a in recent_attempts) or "none",
            mastery_pct=to_percent(mastery),
        )
        try:
            text = await self.gateway.invoke(
                Purpose.ANALYSIS, system, user, self.config.analysis_temperature
            )
        except GatewayError as exc:
            logger.warning("ErrorAnalyzer: falling back to canned analysis: %s", exc)
            return fallback_analysis(score)

        text = text.strip()
        if not text:
            logger.warning("ErrorAnalyzer: empty analysis, using canned analysis")
            return fallback_analysis(score)
        return text
