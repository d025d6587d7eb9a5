"""Quiz stage: generation from a lesson, and evaluation of the learner's answers.

Grading is deterministic and local; the model is only asked for the
analysis half (updated mastery and recommendations).  Every concept the
quiz covered receives at least the baseline mastery update computed by
:func:`calculate_new_mastery`.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence

from langchain_core.prompts import ChatPromptTemplate
from pydantic import ValidationError

from adaptive_tutor.domain.entities import UserModel
from adaptive_tutor.domain.enums import Purpose
from adaptive_tutor.domain.exceptions import ParseError, QuizError
from adaptive_tutor.domain.values import EvaluationResult, Lesson, Quiz, QuizQuestion
from adaptive_tutor.infrastructure.config import PipelineConfig
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.services.base import request_json, to_prompt_json, validate_output
from adaptive_tutor.services.schemas import EvaluationOutput, QuizOutput

logger = logging.getLogger(__name__)

_GENERATE_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a Quiz Generation AI for a learning platform. Your job is "
            "to create a quiz that evaluates understanding of the provided lesson.\n\n"
            "Requirements:\n"
            "- {quiz_size} multiple-choice questions.\n"
            "- Each question has exactly 4 options and one correct option.\n"
            '- Each question MUST include a "concept" tag.\n'
            "- Questions must reflect the lesson content exactly.\n"
            "- Return ONLY JSON.",
        ),
        (
            "human",
            "Student Level: {level}\n\n"
            "Lesson data:\n{lesson}\n\n"
            "Return JSON EXACTLY in this format:\n"
            '{{"quizId": "", "questions": [{{"id": "", "concept": "", "question": "", '
            '"options": ["", "", "", ""], "correctOptionIndex": 0}}]}}',
        ),
    ]
)

_EVALUATE_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a grading and learning analytics AI. The answers have "
            "already been graded. Your responsibilities:\n"
            "- Update mastery scores on a 0-1 scale for the quiz concepts.\n"
            "- Recommend EXACT concepts to reteach.\n"
            "- Output ONLY JSON.",
        ),
        (
            "human",
            "Quiz:\n{quiz}\n\n"
            "User Answers (index represents question order):\n{answers}\n\n"
            "Graded result: {score}/{total} correct; incorrect concepts: {incorrect}\n\n"
            "Existing mastery:\n{mastery}\n\n"
            "Return JSON EXACTLY:\n"
            '{{"updatedMastery": {{}}, "recommendations": ["", ""]}}',
        ),
    ]
)


def calculate_new_mastery(current: float, score: float, gain: float = 0.15) -> float:
    """Mastery after a quiz scored *score* percent.

    The increase is proportional to the score and never exceeds *gain*; the
    result is capped at 1.0.
    """
    return min(current + (score / 100.0) * gain, 1.0)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


# -- QuizGenerator -----------------------------------------------------------


class QuizGenerator:
    """Builds a fixed-size multiple-choice quiz from a lesson."""

    def __init__(self, gateway: LLMGateway, config: PipelineConfig | None = None) -> None:
        self.gateway = gateway
        self.config = config or PipelineConfig()

    async def generate(self, lesson: Lesson, user_model: UserModel) -> Quiz:
        try:
            raw = await request_json(
                self.gateway,
                Purpose.ANALYSIS,
                _GENERATE_PROMPT,
                self.config.quiz_temperature,
                quiz_size=self.config.quiz_size,
                level=user_model.level.value,
                lesson=to_prompt_json(lesson),
            )
        except ParseError as exc:
            raise QuizError(
                f"Quiz for lesson {lesson.lesson_id!r} could not be parsed: {exc}",
                details={"snippet": exc.details.get("snippet", "")},
            ) from exc

        try:
            output = validate_output(QuizOutput, raw)
        except ValidationError as exc:
            raise QuizError(f"Quiz for lesson {lesson.lesson_id!r} is malformed: {exc}") from exc

        if len(output.questions) != self.config.quiz_size:
            raise QuizError(
                f"Expected {self.config.quiz_size} questions, got {len(output.questions)}",
                details={"expected": self.config.quiz_size, "got": len(output.questions)},
            )

        questions = []
        for i, q in enumerate(output.questions):
            try:
                questions.append(
                    QuizQuestion(
                        id=q.id or f"q{i + 1}",
                        concept=q.concept,
                        question=q.question,
                        options=tuple(q.options),
                        correct_option_index=q.correct_option_index,
                    )
                )
            except ValueError as exc:
                raise QuizError(str(exc)) from exc

        quiz = Quiz(quiz_id=output.quiz_id or str(uuid.uuid4()), questions=tuple(questions))
        logger.info(
            "QuizGenerator: quiz %s with %d questions over %s",
            quiz.quiz_id,
            len(quiz.questions),
            list(quiz.concepts),
        )
        return quiz


# -- QuizEvaluator -----------------------------------------------------------


class QuizEvaluator:
    """Grades answers locally and asks the model for the mastery analysis."""

    def __init__(self, gateway: LLMGateway, config: PipelineConfig | None = None) -> None:
        self.gateway = gateway
        self.config = config or PipelineConfig()

    async def evaluate(
        self,
        quiz: Quiz,
        answers: Sequence[int],
        prior_mastery: Mapping[str, float],
    ) -> EvaluationResult:
        if len(answers) != len(quiz.questions):
            raise QuizError(
                f"Got {len(answers)} answers for {len(quiz.questions)} questions",
                details={"answers": len(answers), "questions": len(quiz.questions)},
            )

        score = 0
        incorrect: list[str] = []
        per_concept: dict[str, list[int]] = {}
        for question, answer in zip(quiz.questions, answers):
            correct = question.is_correct(answer)
            hits = per_concept.setdefault(question.concept, [0, 0])
            hits[1] += 1
            if correct:
                score += 1
                hits[0] += 1
            elif question.concept not in incorrect:
                incorrect.append(question.concept)

        baseline = dict(prior_mastery)
        for concept, (right, asked) in per_concept.items():
            baseline[concept] = calculate_new_mastery(
                prior_mastery.get(concept, 0.0),
                100.0 * right / asked,
                self.config.mastery_gain,
            )

        analysis = await self._analyze(quiz, answers, score, incorrect, prior_mastery)

        updated = dict(baseline)
        for concept, value in analysis.updated_mastery.items():
            updated[concept] = _clamp(value)
            if concept in baseline and updated[concept] < baseline[concept]:
                logger.debug(
                    "QuizEvaluator: analysis lowered %r from %.2f to %.2f",
                    concept,
                    baseline[concept],
                    updated[concept],
                )

        result = EvaluationResult(
            score=score,
            total=len(quiz.questions),
            incorrect_concepts=tuple(incorrect),
            updated_mastery=updated,
            recommendations=tuple(analysis.recommendations),
        )
        logger.info(
            "QuizEvaluator: %d/%d correct, incorrect concepts %s",
            result.score,
            result.total,
            list(result.incorrect_concepts),
        )
        return result

    async def _analyze(
        self,
        quiz: Quiz,
        answers: Sequence[int],
        score: int,
        incorrect: list[str],
        prior_mastery: Mapping[str, float],
    ) -> EvaluationOutput:
        try:
            raw = await request_json(
                self.gateway,
                Purpose.ANALYSIS,
                _EVALUATE_PROMPT,
                self.config.evaluation_temperature,
                quiz=to_prompt_json(quiz),
                answers=to_prompt_json(list(answers)),
                score=score,
                total=len(quiz.questions),
                incorrect=to_prompt_json(incorrect),
                mastery=to_prompt_json(dict(prior_mastery)),
            )
        except ParseError as exc:
            raise QuizError(
                f"Evaluation of quiz {quiz.quiz_id!r} could not be parsed: {exc}",
                details={"snippet": exc.details.get("snippet", "")},
            ) from exc

        try:
            return validate_output(EvaluationOutput, raw)
        except ValidationError as exc:
            raise QuizError(f"Evaluation of quiz {quiz.quiz_id!r} is malformed: {exc}") from exc
