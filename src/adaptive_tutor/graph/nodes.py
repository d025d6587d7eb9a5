"""LangGraph node factories for the learning cycle.

Each ``make_*_node`` closes over the service it delegates to and returns an
async node that takes a ``CycleState`` and returns a partial update dict.
Nodes never reimplement stage logic; stage exceptions propagate out of the
graph unchanged.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from adaptive_tutor.domain.exceptions import NoSubtopicError
from adaptive_tutor.domain.plans import extract_next_subtopic
from adaptive_tutor.services.adaptation import LearningAgent
from adaptive_tutor.services.lesson import LessonGenerator
from adaptive_tutor.services.planning import CurriculumPlanner
from adaptive_tutor.services.quiz import QuizEvaluator, QuizGenerator

logger = logging.getLogger(__name__)

Node = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def _event(kind: str, **data: Any) -> dict[str, Any]:
    return {"type": kind, "timestamp": time.time(), **data}


def make_plan_node(planner: CurriculumPlanner) -> Node:
    """Phase A planning: subtopic map only, no test results."""

    async def plan_node(state: dict[str, Any]) -> dict[str, Any]:
        user_model = state["user_model"]
        plan = await planner.plan(user_model)
        return {"plan": plan, "events": [_event("planned", subject=user_model.topic)]}

    return plan_node


def select_subtopic_node(state: dict[str, Any]) -> dict[str, Any]:
    """Resolve the subtopic to teach; fail fast when the plan names none."""
    subtopic = extract_next_subtopic(state.get("plan"))
    if not subtopic:
        raise NoSubtopicError("Planner did not produce a usable subtopic")
    logger.info("select_subtopic_node: next subtopic %r", subtopic)
    return {"next_subtopic": subtopic, "events": [_event("subtopic_selected", subtopic=subtopic)]}


def make_lesson_node(generator: LessonGenerator) -> Node:
    async def lesson_node(state: dict[str, Any]) -> dict[str, Any]:
        lesson = await generator.generate(state["next_subtopic"], state["user_model"])
        return {"lesson": lesson, "events": [_event("lesson_ready", lesson_id=lesson.lesson_id)]}

    return lesson_node


def make_quiz_node(generator: QuizGenerator) -> Node:
    async def quiz_node(state: dict[str, Any]) -> dict[str, Any]:
        quiz = await generator.generate(state["lesson"], state["user_model"])
        return {"quiz": quiz, "events": [_event("quiz_ready", quiz_id=quiz.quiz_id)]}

    return quiz_node


def restore_node(state: dict[str, Any]) -> dict[str, Any]:
    """Reuse the plan, lesson and quiz of the result the learner is answering."""
    previous = state["previous"]
    logger.debug("restore_node: grading against quiz %s", previous.quiz.quiz_id)
    return {
        "plan": previous.plan,
        "next_subtopic": previous.next_subtopic,
        "lesson": previous.lesson,
        "quiz": previous.quiz,
        "events": [_event("restored", quiz_id=previous.quiz.quiz_id)],
    }


def make_evaluate_node(evaluator: QuizEvaluator) -> Node:
    """Grade the answers and replace the learner's mastery map.

    This is the only place a cycle writes ``user_model.mastery``.
    """

    async def evaluate_node(state: dict[str, Any]) -> dict[str, Any]:
        user_model = state["user_model"]
        prior = dict(user_model.mastery)
        result = await evaluator.evaluate(state["quiz"], state["answers"], prior)
        user_model.mastery = dict(result.updated_mastery)
        return {
            "prior_mastery": prior,
            "eval_result": result,
            "events": [_event("evaluated", score=result.score, total=result.total)],
        }

    return evaluate_node


def make_adapt_node(agent: LearningAgent) -> Node:
    async def adapt_node(state: dict[str, Any]) -> dict[str, Any]:
        outcome = await agent.adapt(
            state["user_model"],
            state["quiz"],
            state["answers"],
            state["eval_result"],
            state.get("prior_mastery", {}),
            subtopic=state.get("next_subtopic", ""),
        )
        return {
            "adaptation": outcome,
            "events": [_event("adapted", decision=outcome.decision.decision.value)],
        }

    return adapt_node


def make_replan_node(planner: CurriculumPlanner) -> Node:
    """Re-plan with the evaluation as final test results."""

    async def replan_node(state: dict[str, Any]) -> dict[str, Any]:
        followup = await planner.plan(state["user_model"], state["eval_result"])
        recommended = extract_next_subtopic(followup)
        logger.info("replan_node: recommended next %r", recommended)
        return {
            "followup_plan": followup,
            "recommended_next": recommended,
            "events": [_event("replanned", recommended_next=recommended)],
        }

    return replan_node
