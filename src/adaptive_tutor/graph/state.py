"""LangGraph state definition for the learning cycle.

Defines ``CycleState``, a ``TypedDict`` that flows through the cycle
``StateGraph``.  Stage outputs are plain channels written once per run;
``events`` is append-only.

Note: We intentionally do NOT use ``from __future__ import annotations`` because
LangGraph needs to resolve type hints at runtime via ``get_type_hints()``.
"""

import operator
from typing import Annotated, Any, Optional, TypedDict

from adaptive_tutor.domain.entities import UserModel
from adaptive_tutor.domain.values import AdaptationOutcome, EvaluationResult, Lesson, Quiz


class CycleState(TypedDict, total=False):
    """State flowing through the learning-cycle graph.

    Fields are grouped into:

    * **Inputs** -- set once at invocation.
    * **Phase A outputs** -- plan, subtopic, lesson, quiz.
    * **Phase B outputs** -- evaluation, adaptation, follow-up plan.
    * **Accumulation channels** -- append-reducer for stage events.
    """

    # -- Inputs --------------------------------------------------------------
    user_model: UserModel
    answers: Optional[list[int]]
    previous: Any  # QuizReadyResult being answered, if any

    # -- Phase A outputs -----------------------------------------------------
    plan: Any  # PlanResult
    next_subtopic: str
    lesson: Lesson
    quiz: Quiz

    # -- Phase B outputs -----------------------------------------------------
    prior_mastery: dict[str, float]
    eval_result: EvaluationResult
    adaptation: Optional[AdaptationOutcome]
    followup_plan: Any  # PlanResult
    recommended_next: Optional[str]

    # -- Accumulation channels -----------------------------------------------
    events: Annotated[list, operator.add]
