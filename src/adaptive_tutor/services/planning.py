"""Curriculum planning stage.

Five chained model calls share one learner/subject context, each consuming
the previous call's validated output:

1. subtopic mapping
2. weakness analysis (skipped on the first pass of a cycle)
3. curriculum draft
4. optimization
5. validation

A parse or shape failure at any step aborts the whole stage with a
:class:`PlanningError` naming the step; no partial curriculum is returned.
Gateway failures propagate unchanged.
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, ValidationError

from adaptive_tutor.domain.entities import UserModel
from adaptive_tutor.domain.enums import Purpose
from adaptive_tutor.domain.exceptions import ParseError, PlanningError
from adaptive_tutor.domain.plans import CurriculumResult, PlanResult, SubtopicMapResult
from adaptive_tutor.domain.values import (
    CurriculumEntry,
    EvaluationResult,
    Subtopic,
    WeaknessAnalysis,
    dangling_prerequisites,
)
from adaptive_tutor.infrastructure.config import PipelineConfig
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.services.base import request_json, to_prompt_json, validate_output
from adaptive_tutor.services.schemas import (
    CurriculumDraftOutput,
    CurriculumEntryOutput,
    OptimizedCurriculumOutput,
    SubtopicMapOutput,
    ValidatedCurriculumOutput,
    WeaknessOutput,
)

logger = logging.getLogger(__name__)


# -- Prompts -----------------------------------------------------------------

_SUBTOPIC_MAP_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a subject-mapping AI. Given any subject, create a "
            "comprehensive, ordered list of the MOST important subtopics a "
            "beginner/intermediate/advanced student must learn to master it.\n\n"
            "Requirements:\n"
            "- Output ONLY JSON.\n"
            "- Subtopics must be specific and useful for making lessons.\n"
            "- Include {min_subtopics}-{max_subtopics} subtopics.\n"
            "- Prerequisites reference other subtopic ids from the same list.",
        ),
        (
            "human",
            "Subject chosen by user: {subject}\n"
            "Student level: {level}\n\n"
            "Return EXACT JSON:\n"
            '{{"subtopics": [{{"id": "s1", "name": "", "prerequisites": []}}]}}',
        ),
    ]
)

_WEAKNESS_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are an educational analytics AI. Use ONLY the final test "
            "performance and the generated subtopics to determine which areas "
            "the learner must focus on. Output ONLY JSON.",
        ),
        (
            "human",
            "Generated Subtopics:\n{subtopics}\n\n"
            "Final Test Results:\n{test_results}\n\n"
            "Mastery (before test):\n{mastery}\n\n"
            "Return EXACT JSON:\n"
            '{{"weakConcepts": [], "strongConcepts": [], '
            '"criticalFailures": [], "primaryFocus": ""}}',
        ),
    ]
)

_DRAFT_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a curriculum designer AI. Design lessons ONLY from the "
            "generated subtopics and the weakness analysis.\n\n"
            "Rules:\n"
            "- Address critical failures first.\n"
            "- Next, address the remaining weak concepts.\n"
            "- Leave out strong concepts entirely.\n"
            "- Build the sequence from prerequisites upward.\n"
            "- Return ONLY JSON.",
        ),
        (
            "human",
            "Weakness Analysis:\n{weakness}\n\n"
            "All available subtopics for this subject:\n{subtopics}\n\n"
            "Return EXACT JSON:\n"
            '{{"curriculum": [{{"lessonId": "", "title": "", "subtopic": "", '
            '"estimatedTime": 0, "skillsTargeted": []}}]}}',
        ),
    ]
)

_OPTIMIZE_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a curriculum optimization AI. Improve the curriculum by "
            "applying prerequisite ordering and difficulty scaling, avoiding "
            "overload, and eliminating redundant lessons. Output ONLY JSON.",
        ),
        (
            "human",
            "Draft Curriculum:\n{draft}\n\n"
            "Subtopics (for prerequisites):\n{subtopics}\n\n"
            "Weakness Analysis:\n{weakness}\n\n"
            "Return EXACT JSON:\n"
            '{{"optimizedCurriculum": [{{"lessonId": "", "title": "", "subtopic": "", '
            '"estimatedTime": 0, "skillsTargeted": []}}]}}',
        ),
    ]
)

_VALIDATE_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a curriculum validation AI. Validate that:\n"
            "- All weak concepts are addressed\n"
            "- Critical failures come FIRST\n"
            "- Prerequisite order is correct\n"
            "- The curriculum is actionable and realistic\n"
            "- Subtopic names match the generated map\n\n"
            "Fix any problems and output ONLY JSON.",
        ),
        (
            "human",
            "Optimized Curriculum:\n{optimized}\n\n"
            "Generated Subtopics:\n{subtopics}\n\n"
            "Weakness Analysis:\n{weakness}\n\n"
            "Return EXACT JSON:\n"
            '{{"finalCurriculum": [], "notes": ""}}',
        ),
    ]
)


def _entries(outputs: list[CurriculumEntryOutput]) -> tuple[CurriculumEntry, ...]:
    return tuple(
        CurriculumEntry(
            lesson_id=o.lesson_id,
            title=o.title,
            subtopic=o.subtopic,
            estimated_time=o.estimated_time,
            skills_targeted=tuple(o.skills_targeted),
        )
        for o in outputs
    )


# -- CurriculumPlanner -------------------------------------------------------


class CurriculumPlanner:
    """Chained five-step curriculum planner.

    Parameters
    ----------
    gateway:
        The model gateway.
    config:
        Pipeline settings (subtopic range, temperature).
    """

    def __init__(self, gateway: LLMGateway, config: PipelineConfig | None = None) -> None:
        self.gateway = gateway
        self.config = config or PipelineConfig()

    async def plan(
        self,
        user_model: UserModel,
        final_test_results: EvaluationResult | None = None,
    ) -> PlanResult:
        """Plan the learner's curriculum.

        With no *final_test_results* (first pass of a cycle) only the
        subtopic map is produced and a :class:`SubtopicMapResult` returned.
        Otherwise all five steps run and a :class:`CurriculumResult` is
        returned.  ``user_model.generated_subtopics`` is updated either way.
        """
        if not user_model.topic:
            raise PlanningError(
                "User must choose a topic before planning", stage="subtopic_map"
            )

        subtopics = await self.map_subtopics(user_model)
        user_model.generated_subtopics = subtopics

        if final_test_results is None:
            logger.info(
                "CurriculumPlanner: no test results, weakness analysis skipped "
                "(%d subtopics)",
                len(subtopics),
            )
            return SubtopicMapResult(subject=user_model.topic, subtopic_map=subtopics)

        weakness = await self.analyze_weaknesses(subtopics, user_model, final_test_results)
        draft = await self.draft_curriculum(weakness, subtopics)
        optimized = await self.optimize(draft, subtopics, weakness)
        final, notes = await self.validate(optimized, subtopics, weakness)

        logger.info(
            "CurriculumPlanner: %d lessons planned, focus=%r",
            len(final),
            weakness.primary_focus,
        )
        return CurriculumResult(
            subject=user_model.topic,
            subtopic_map=subtopics,
            weakness_analysis=weakness,
            draft=draft,
            optimized=optimized,
            curriculum=final,
            notes=notes,
        )

    # -- steps ----------------------------------------------------------------

    async def map_subtopics(self, user_model: UserModel) -> tuple[Subtopic, ...]:
        output = await self._step(
            "subtopic_map",
            SubtopicMapOutput,
            Purpose.ANALYSIS,
            _SUBTOPIC_MAP_PROMPT,
            subject=user_model.topic,
            level=user_model.level.value,
            min_subtopics=self.config.min_subtopics,
            max_subtopics=self.config.max_subtopics,
        )
        subtopics = tuple(
            Subtopic(id=s.id, name=s.name, prerequisites=tuple(s.prerequisites))
            for s in output.subtopics
        )

        if not (self.config.min_subtopics <= len(subtopics) <= self.config.max_subtopics):
            logger.warning(
                "CurriculumPlanner: %d subtopics outside requested range [%d, %d]",
                len(subtopics),
                self.config.min_subtopics,
                self.config.max_subtopics,
            )
        dangling = dangling_prerequisites(subtopics)
        if dangling:
            logger.warning("CurriculumPlanner: dangling prerequisite ids %s", dangling)
        return subtopics

    async def analyze_weaknesses(
        self,
        subtopics: tuple[Subtopic, ...],
        user_model: UserModel,
        final_test_results: EvaluationResult,
    ) -> WeaknessAnalysis:
        output = await self._step(
            "weakness_analysis",
            WeaknessOutput,
            Purpose.ANALYSIS,
            _WEAKNESS_PROMPT,
            subtopics=to_prompt_json(subtopics),
            test_results=to_prompt_json(final_test_results),
            mastery=to_prompt_json(user_model.mastery),
        )
        return WeaknessAnalysis(
            weak_concepts=tuple(output.weak_concepts),
            strong_concepts=tuple(output.strong_concepts),
            critical_failures=tuple(output.critical_failures),
            primary_focus=output.primary_focus,
        )

    async def draft_curriculum(
        self,
        weakness: WeaknessAnalysis,
        subtopics: tuple[Subtopic, ...],
    ) -> tuple[CurriculumEntry, ...]:
        output = await self._step(
            "curriculum_draft",
            CurriculumDraftOutput,
            Purpose.GENERATION,
            _DRAFT_PROMPT,
            weakness=to_prompt_json(weakness),
            subtopics=to_prompt_json(subtopics),
        )
        return _entries(output.curriculum)

    async def optimize(
        self,
        draft: tuple[CurriculumEntry, ...],
        subtopics: tuple[Subtopic, ...],
        weakness: WeaknessAnalysis,
    ) -> tuple[CurriculumEntry, ...]:
        output = await self._step(
            "optimization",
            OptimizedCurriculumOutput,
            Purpose.TUTORING,
            _OPTIMIZE_PROMPT,
            draft=to_prompt_json(draft),
            subtopics=to_prompt_json(subtopics),
            weakness=to_prompt_json(weakness),
        )
        return _entries(output.optimized_curriculum)

    async def validate(
        self,
        optimized: tuple[CurriculumEntry, ...],
        subtopics: tuple[Subtopic, ...],
        weakness: WeaknessAnalysis,
    ) -> tuple[tuple[CurriculumEntry, ...], str]:
        output = await self._step(
            "validation",
            ValidatedCurriculumOutput,
            Purpose.ANALYSIS,
            _VALIDATE_PROMPT,
            optimized=to_prompt_json(optimized),
            subtopics=to_prompt_json(subtopics),
            weakness=to_prompt_json(weakness),
        )
        final = _entries(output.final_curriculum)

        known = {s.name for s in subtopics}
        unknown = [e.subtopic for e in final if e.subtopic and e.subtopic not in known]
        if unknown:
            logger.warning(
                "CurriculumPlanner: final curriculum names subtopics missing from the map: %s",
                unknown,
            )
        return final, output.notes

    # -- internals ------------------------------------------------------------

    async def _step(
        self,
        stage: str,
        schema: type[BaseModel],
        purpose: Purpose,
        prompt: ChatPromptTemplate,
        **variables: Any,
    ) -> Any:
        logger.debug("CurriculumPlanner: running %s", stage)
        try:
            raw = await request_json(
                self.gateway,
                purpose,
                prompt,
                self.config.planning_temperature,
                **variables,
            )
        except ParseError as exc:
            raise PlanningError(
                f"Planning step {stage!r} returned unparseable output: {exc}",
                stage=stage,
                details={"snippet": exc.details.get("snippet", "")},
            ) from exc

        try:
            return validate_output(schema, raw)
        except ValidationError as exc:
            raise PlanningError(
                f"Planning step {stage!r} returned malformed output: {exc}",
                stage=stage,
            ) from exc
