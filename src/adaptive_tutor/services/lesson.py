"""Lesson stage: one structured lesson per subtopic."""

from __future__ import annotations

import logging
import uuid

from langchain_core.prompts import ChatPromptTemplate
from pydantic import ValidationError

from adaptive_tutor.domain.entities import UserModel
from adaptive_tutor.domain.enums import Purpose
from adaptive_tutor.domain.exceptions import LessonGenerationError, ParseError
from adaptive_tutor.domain.values import Lesson, LessonExample
from adaptive_tutor.infrastructure.config import PipelineConfig
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.services.base import request_json, to_prompt_json, validate_output
from adaptive_tutor.services.schemas import LessonOutput

logger = logging.getLogger(__name__)

_LESSON_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are an Education-Focused Lesson Generation AI. "
            "You MUST return structured JSON only.\n\n"
            "Your responsibilities:\n"
            "- Write a clear, structured lesson for the given subtopic.\n"
            "- Adapt content to the student's level: beginner, intermediate, advanced.\n"
            "- Include a title, learning objectives, an explanation, step-by-step "
            "examples, one mini-check question, 2-3 practice problems (no "
            "solutions) and an optional ASCII visual.\n\n"
            "Do NOT include extra commentary.",
        ),
        (
            "human",
            'Subtopic to teach: "{subtopic}"\n'
            "Student Level: {level}\n"
            "Mastery Scores: {mastery}\n\n"
            "Return JSON in EXACT format:\n"
            '{{"lessonId": "", "title": "", "subtopic": "", "level": "", '
            '"objectives": [""], "explanation": "", '
            '"examples": [{{"header": "", "steps": [""]}}], '
            '"miniCheck": "", "practiceProblems": [""], "asciiVisual": ""}}',
        ),
    ]
)


class LessonGenerator:
    """Generates a lesson adapted to the learner's level and mastery.

    There is no fallback content: a reply that cannot be parsed into a
    lesson raises :class:`LessonGenerationError`.
    """

    def __init__(self, gateway: LLMGateway, config: PipelineConfig | None = None) -> None:
        self.gateway = gateway
        self.config = config or PipelineConfig()

    async def generate(self, subtopic: str, user_model: UserModel) -> Lesson:
        logger.debug("LessonGenerator: generating lesson for %r", subtopic)
        try:
            raw = await request_json(
                self.gateway,
                Purpose.GENERATION,
                _LESSON_PROMPT,
                self.config.lesson_temperature,
                subtopic=subtopic,
                level=user_model.level.value,
                mastery=to_prompt_json(user_model.mastery),
            )
        except ParseError as exc:
            raise LessonGenerationError(
                f"Lesson for {subtopic!r} could not be parsed: {exc}",
                subtopic=subtopic,
                details={"snippet": exc.details.get("snippet", "")},
            ) from exc

        try:
            output = validate_output(LessonOutput, raw)
        except ValidationError as exc:
            raise LessonGenerationError(
                f"Lesson for {subtopic!r} is malformed: {exc}",
                subtopic=subtopic,
            ) from exc

        lesson = Lesson(
            lesson_id=output.lesson_id or f"lesson-{uuid.uuid4().hex[:8]}",
            title=output.title,
            subtopic=output.subtopic or subtopic,
            level=output.level or user_model.level.value,
            objectives=tuple(output.objectives),
            explanation=output.explanation,
            examples=tuple(
                LessonExample(header=e.header, steps=tuple(e.steps)) for e in output.examples
            ),
            mini_check=output.mini_check,
            practice_problems=tuple(output.practice_problems),
            ascii_visual=output.ascii_visual,
        )
        logger.info("LessonGenerator: lesson %r ready (%s)", lesson.title, lesson.lesson_id)
        return lesson
