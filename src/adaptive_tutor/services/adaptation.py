"""The learning agent: turns a graded quiz into an adaptation decision.

Steps, in order:

1. gather context (recent attempts, prerequisites of the taught subtopic)
2. analyze errors
3. decide (DRILL / RETEACH / ADVANCE / REINFORCE)
4. execute the decision (follow-up problems where it calls for them)
5. record the attempt, mastery and session in the progress store

Model failures never escape: analysis, decision and problem generation each
have a deterministic fallback.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from adaptive_tutor.domain.entities import UserModel, mean_mastery
from adaptive_tutor.domain.values import (
    AdaptationOutcome,
    EvaluationResult,
    Quiz,
    QuizAttempt,
    SessionRecord,
    Subtopic,
)
from adaptive_tutor.infrastructure.config import PipelineConfig
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.infrastructure.progress_store import ProgressStore
from adaptive_tutor.services.decision import AdaptiveDecisionEngine
from adaptive_tutor.services.diagnosis import ErrorAnalyzer

logger = logging.getLogger(__name__)

RATIONALE_LENGTH = 200


def resolve_prerequisites(
    subtopic: str,
    subtopic_map: Sequence[Subtopic] | None,
) -> tuple[Subtopic, ...]:
    """Prerequisite entries of *subtopic* (matched by name or id).

    Prerequisite ids missing from the map are returned as bare entries.
    """
    if not subtopic or not subtopic_map:
        return ()
    key = subtopic.strip().lower()
    entry = next(
        (s for s in subtopic_map if key in (s.name.strip().lower(), s.id.strip().lower())),
        None,
    )
    if entry is None:
        return ()
    by_id = {s.id: s for s in subtopic_map}
    return tuple(by_id.get(p, Subtopic(id=p, name="")) for p in entry.prerequisites)


class LearningAgent:
    """Runs error analysis, decision and follow-up for one quiz submission.

    Parameters
    ----------
    gateway:
        The model gateway shared by the analyzer and decision engine.
    store:
        Optional progress store; when given, the attempt, the updated
        mastery and the session are recorded there.
    config:
        Pipeline settings.
    """

    def __init__(
        self,
        gateway: LLMGateway,
        store: ProgressStore | None = None,
        config: PipelineConfig | None = None,
        analyzer: ErrorAnalyzer | None = None,
        decision_engine: AdaptiveDecisionEngine | None = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.store = store
        self.analyzer = analyzer or ErrorAnalyzer(gateway, self.config)
        self.decision_engine = decision_engine or AdaptiveDecisionEngine(
            gateway, config=self.config
        )

    async def adapt(
        self,
        user_model: UserModel,
        quiz: Quiz,
        answers: Sequence[int],
        evaluation: EvaluationResult,
        prior_mastery: Mapping[str, float],
        subtopic: str = "",
    ) -> AdaptationOutcome:
        mastery = mean_mastery(prior_mastery, quiz.concepts)
        score = evaluation.percentage
        logger.info(
            "LearningAgent: user=%r topic=%r score=%.0f%% mastery=%.0f%%",
            user_model.user_id,
            user_model.topic,
            score,
            mastery * 100,
        )

        recent: list[QuizAttempt] = []
        if self.store is not None:
            recent = self.store.recent_attempts(
                user_model.user_id, user_model.topic, self.config.recent_attempts_limit
            )
        prerequisites = resolve_prerequisites(subtopic, user_model.generated_subtopics)

        analysis = await self.analyzer.analyze(score, answers, recent, mastery)
        logger.debug("LearningAgent: analysis %s", analysis[:100])

        decision = await self.decision_engine.decide(analysis, mastery, score, prerequisites)
        decision = await self.decision_engine.follow_up(
            decision, analysis, subtopic or user_model.topic
        )

        session = SessionRecord(
            user_id=user_model.user_id,
            topic=user_model.topic,
            decision=decision.decision.value,
            feedback=decision.feedback,
            follow_up_problems=decision.follow_up_problems,
            rationale=f"Decision: {decision.decision.value}. "
            f"Rationale: {analysis[:RATIONALE_LENGTH]}",
        )
        if self.store is not None:
            self.store.append_quiz_attempt(
                QuizAttempt(
                    user_id=user_model.user_id,
                    topic=user_model.topic,
                    quiz_id=quiz.quiz_id,
                    score=score,
                    correct_answers=evaluation.score,
                    total_questions=evaluation.total,
                    answers=tuple(answers),
                )
            )
            self.store.set_mastery(
                user_model.user_id, user_model.topic, dict(evaluation.updated_mastery)
            )
            self.store.append_session(session)
            logger.debug("LearningAgent: session %s stored", session.session_id)

        return AdaptationOutcome(
            decision=decision,
            error_analysis=analysis,
            mastery=mastery,
            score=score,
            session_id=session.session_id,
        )
