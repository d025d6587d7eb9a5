"""Adaptive decision engine.

Chooses one of four pedagogical actions from an error analysis and the
learner's mastery.  The model is asked for a single word; anything other
than a valid decision, including a failed call, falls back to a fixed rule
table so a decision is always produced.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from langchain_core.prompts import ChatPromptTemplate

from adaptive_tutor.domain.enums import Decision, Difficulty, Purpose
from adaptive_tutor.domain.exceptions import GatewayError
from adaptive_tutor.domain.values import AdaptationDecision, Problem, Subtopic
from adaptive_tutor.infrastructure.config import PipelineConfig
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.services.base import render_prompt, round_half_up, to_percent
from adaptive_tutor.services.problems import ProblemGenerator

logger = logging.getLogger(__name__)

# Difficulty of the follow-up problems each decision calls for; absent = none.
PROBLEM_DIFFICULTY: dict[Decision, Difficulty] = {
    Decision.DRILL: Difficulty.HARD,
    Decision.REINFORCE: Difficulty.MEDIUM,
}

_DECISION_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are an educational decision engine. "
            "Make precise adaptive learning decisions.",
        ),
        (
            "human",
            "Based on this analysis:\n{error_analysis}\n\n"
            "Student Metrics:\n"
            "- Quiz Score: {score}/100\n"
            "- Mastery Level: {mastery_pct}%\n"
            "- Prerequisites Available: {prerequisites}\n\n"
            "DECIDE what the learning system should do:\n"
            "1. DRILL - Generate more practice problems on the same topic\n"
            "2. RETEACH - Go back to prerequisites first\n"
            "3. ADVANCE - Move to next topic\n"
            "4. REINFORCE - Consolidate current understanding\n\n"
            "Decision Logic:\n"
            "- If mastery < 30% OR score < 40% AND gaps in prerequisites -> RETEACH\n"
            "- If mastery < 50% AND trending up -> DRILL\n"
            "- If 50% < mastery < 80% -> REINFORCE or DRILL\n"
            "- If mastery > 80% -> ADVANCE\n"
            "- If score high but low mastery -> ADVANCE quickly\n\n"
            "Respond with ONLY the decision word: DRILL | RETEACH | ADVANCE | REINFORCE",
        ),
    ]
)


def feedback_for(
    decision: Decision,
    mastery: float,
    prerequisites: Sequence[Subtopic] = (),
) -> str:
    """Canned learner-facing feedback for *decision*."""
    if decision is Decision.DRILL:
        return (
            "Great effort! Your understanding is improving. Let's practice more "
            "problems to solidify these concepts. "
            f"You're {to_percent(mastery)}% of the way to mastery!"
        )
    if decision is Decision.RETEACH:
        prereq = prerequisites[0].label if prerequisites else "fundamentals"
        return (
            f"I noticed you might benefit from reviewing {prereq} first. "
            "Let's strengthen those foundations before moving forward."
        )
    if decision is Decision.ADVANCE:
        return (
            "Excellent! You've mastered this concept. You're ready to move to "
            "the next topic and expand your knowledge!"
        )
    return (
        "You're on the right track! Let's review and solidify what you've "
        "learned to build a strong foundation for what comes next."
    )


def fallback_decision(mastery: float, prerequisites: Sequence[Subtopic] = ()) -> Decision:
    """Rule table used whenever the model gives no valid decision."""
    if mastery < 0.3 and prerequisites:
        return Decision.RETEACH
    if mastery < 0.5:
        return Decision.DRILL
    if mastery > 0.8:
        return Decision.ADVANCE
    return Decision.REINFORCE


def parse_decision(text: str | None) -> Decision | None:
    """Normalize a one-word model reply; ``None`` when it is not a decision."""
    if not text:
        return None
    try:
        return Decision(text.strip().upper())
    except ValueError:
        return None


class AdaptiveDecisionEngine:
    """Picks DRILL / RETEACH / ADVANCE / REINFORCE and attaches follow-up work.

    Parameters
    ----------
    gateway:
        The model gateway.
    problem_generator:
        Source of follow-up problems; built on *gateway* when omitted.
    config:
        Pipeline settings.
    """

    def __init__(
        self,
        gateway: LLMGateway,
        problem_generator: ProblemGenerator | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self.gateway = gateway
        self.config = config or PipelineConfig()
        self.problem_generator = problem_generator or ProblemGenerator(gateway, self.config)

    async def decide(
        self,
        error_analysis: str,
        mastery: float,
        score: float,
        prerequisites: Sequence[Subtopic] = (),
    ) -> AdaptationDecision:
        """Choose a decision.  Never raises for model failures."""
        system, user = render_prompt(
            _DECISION_PROMPT,
            error_analysis=error_analysis,
            score=round_half_up(score),
            mastery_pct=to_percent(mastery),
            prerequisites=", ".join(p.label for p in prerequisites) or "None",
        )

        decision: Decision | None
        try:
            reply = await self.gateway.invoke(
                Purpose.TUTORING, system, user, self.config.decision_temperature
            )
            decision = parse_decision(reply)
            if decision is None:
                logger.warning("AdaptiveDecisionEngine: invalid decision %r", reply[:50])
        except GatewayError as exc:
            logger.warning("AdaptiveDecisionEngine: decision call failed: %s", exc)
            decision = None

        from_fallback = decision is None
        if decision is None:
            decision = fallback_decision(mastery, prerequisites)

        logger.info(
            "AdaptiveDecisionEngine: %s (mastery=%.2f, fallback=%s)",
            decision.value,
            mastery,
            from_fallback,
        )
        return AdaptationDecision(
            decision=decision,
            feedback=feedback_for(decision, mastery, prerequisites),
            from_fallback=from_fallback,
        )

    async def follow_up(
        self,
        decision: AdaptationDecision,
        error_analysis: str,
        topic: str,
    ) -> AdaptationDecision:
        """Attach the practice problems *decision* calls for."""
        difficulty = PROBLEM_DIFFICULTY.get(decision.decision)
        if difficulty is None:
            return decision
        problems: tuple[Problem, ...] = await self.problem_generator.generate(
            error_analysis, topic, difficulty
        )
        return decision.with_problems(problems)
