"""Cycle orchestrator -- the public entry point of the pipeline.

``CycleOrchestrator.run_cycle`` drives one learning cycle through the
compiled LangGraph:

* **Phase A** (no answers): plan -> select subtopic -> lesson -> quiz,
  returning a :class:`QuizReadyResult`.
* **Phase B** (answers supplied): Phase A's steps, then evaluate -> update
  mastery -> adapt -> re-plan, returning an :class:`EvaluationCompleteResult`.
  Passing ``previous=`` (the Phase A result the learner answered) reuses its
  plan, lesson and quiz instead of generating new ones.

The orchestrator holds no per-learner state; the caller owns the
:class:`UserModel` and any concurrency control per learner.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

from adaptive_tutor.domain.entities import UserModel
from adaptive_tutor.domain.enums import CyclePhase
from adaptive_tutor.domain.plans import PlanResult, plan_to_dict
from adaptive_tutor.domain.values import AdaptationOutcome, EvaluationResult, Lesson, Quiz
from adaptive_tutor.graph.graph import build_learning_cycle_graph
from adaptive_tutor.infrastructure.config import GatewayConfig, PipelineConfig
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.infrastructure.progress_store import ProgressStore
from adaptive_tutor.services.adaptation import LearningAgent
from adaptive_tutor.services.lesson import LessonGenerator
from adaptive_tutor.services.planning import CurriculumPlanner
from adaptive_tutor.services.quiz import QuizEvaluator, QuizGenerator

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Results                                                               #
# ===================================================================== #


@dataclass
class QuizReadyResult:
    """Phase A outcome: a lesson and an unanswered quiz."""

    plan: PlanResult
    next_subtopic: str
    lesson: Lesson
    quiz: Quiz
    user_model: UserModel

    @property
    def cycle(self) -> str:
        return CyclePhase.QUIZ_READY.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "cycle": self.cycle,
            "plan": plan_to_dict(self.plan),
            "nextSubtopic": self.next_subtopic,
            "lesson": self.lesson.to_dict(),
            "quiz": self.quiz.to_dict(),
            "userModel": self.user_model.to_dict(),
        }


@dataclass
class EvaluationCompleteResult:
    """Phase B outcome: graded quiz, updated learner, and the follow-up plan."""

    plan: PlanResult
    previous_lesson: Lesson
    quiz: Quiz
    eval_result: EvaluationResult
    updated_model: UserModel
    followup_plan: PlanResult
    recommended_next: str | None
    adaptation: AdaptationOutcome | None = None

    @property
    def cycle(self) -> str:
        return CyclePhase.EVALUATION_COMPLETE.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "cycle": self.cycle,
            "plan": plan_to_dict(self.plan),
            "previousLesson": self.previous_lesson.to_dict(),
            "quiz": self.quiz.to_dict(),
            "evalResult": self.eval_result.to_dict(),
            "updatedModel": self.updated_model.to_dict(),
            "followupPlan": plan_to_dict(self.followup_plan),
            "recommendedNext": self.recommended_next,
            "adaptation": self.adaptation.to_dict() if self.adaptation else None,
        }


CycleResult = Union[QuizReadyResult, EvaluationCompleteResult]


# ===================================================================== #
#  Orchestrator                                                          #
# ===================================================================== #


class CycleOrchestrator:
    """Runs learning cycles over an explicitly injected gateway.

    Parameters
    ----------
    gateway:
        The model gateway shared by every stage.
    config:
        Pipeline settings.
    store:
        Optional progress store; Phase B records attempts, mastery and
        sessions there.

    Example
    -------
    ::

        orchestrator = CycleOrchestrator(gateway)
        ready = await orchestrator.run_cycle(UserModel(topic="Calculus"))
        done = await orchestrator.run_cycle(
            ready.user_model, answers=[1, 3, 0, 0, 2], previous=ready
        )
    """

    def __init__(
        self,
        gateway: LLMGateway,
        config: PipelineConfig | None = None,
        store: ProgressStore | None = None,
    ) -> None:
        self.gateway = gateway
        self.config = config or PipelineConfig()
        self.store = store
        self.planner = CurriculumPlanner(gateway, self.config)
        self.lesson_generator = LessonGenerator(gateway, self.config)
        self.quiz_generator = QuizGenerator(gateway, self.config)
        self.quiz_evaluator = QuizEvaluator(gateway, self.config)
        self.learning_agent = LearningAgent(gateway, store=store, config=self.config)
        self._graph = build_learning_cycle_graph(
            planner=self.planner,
            lesson_generator=self.lesson_generator,
            quiz_generator=self.quiz_generator,
            quiz_evaluator=self.quiz_evaluator,
            learning_agent=self.learning_agent,
        )

    @classmethod
    def from_config(
        cls,
        gateway_config: GatewayConfig | None = None,
        config: PipelineConfig | None = None,
        store: ProgressStore | None = None,
    ) -> CycleOrchestrator:
        """Build an orchestrator backed by OpenRouter models."""
        return cls(LLMGateway.from_config(gateway_config or GatewayConfig()), config, store)

    @property
    def graph(self) -> Any:
        """The compiled LangGraph."""
        return self._graph

    async def run_cycle(
        self,
        user_model: UserModel,
        answers: Sequence[int] | None = None,
        previous: QuizReadyResult | None = None,
    ) -> CycleResult:
        """Run one cycle for *user_model*.

        Raises
        ------
        NoSubtopicError
            Planning produced nothing to teach.
        PlanningError, LessonGenerationError, QuizError, GatewayError
            A fatal stage failed; see ``details["stage"]``.
        """
        if previous is not None and answers is None:
            logger.warning("run_cycle: previous result given without answers, ignored")
            previous = None

        start = time.monotonic()
        state = await self._graph.ainvoke(
            {
                "user_model": user_model,
                "answers": list(answers) if answers is not None else None,
                "previous": previous,
                "events": [],
            }
        )
        elapsed = time.monotonic() - start

        if answers is None:
            logger.info(
                "run_cycle: quiz ready for %r in %.2fs (subtopic %r)",
                user_model.topic,
                elapsed,
                state["next_subtopic"],
            )
            return QuizReadyResult(
                plan=state["plan"],
                next_subtopic=state["next_subtopic"],
                lesson=state["lesson"],
                quiz=state["quiz"],
                user_model=user_model,
            )

        logger.info(
            "run_cycle: evaluation complete for %r in %.2fs (recommended next %r)",
            user_model.topic,
            elapsed,
            state.get("recommended_next"),
        )
        return EvaluationCompleteResult(
            plan=state["plan"],
            previous_lesson=state["lesson"],
            quiz=state["quiz"],
            eval_result=state["eval_result"],
            updated_model=user_model,
            followup_plan=state["followup_plan"],
            recommended_next=state.get("recommended_next"),
            adaptation=state.get("adaptation"),
        )
