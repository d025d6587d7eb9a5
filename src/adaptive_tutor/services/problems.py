"""Follow-up practice problems targeting diagnosed gaps."""

from __future__ import annotations

import logging

from langchain_core.prompts import ChatPromptTemplate
from pydantic import ValidationError

from adaptive_tutor.domain.enums import Difficulty, Purpose
from adaptive_tutor.domain.exceptions import GatewayError, ParseError
from adaptive_tutor.domain.values import Problem
from adaptive_tutor.infrastructure.config import PipelineConfig
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.services.base import request_json, validate_output
from adaptive_tutor.services.schemas import ProblemSetOutput

logger = logging.getLogger(__name__)

FALLBACK_PROBLEMS: dict[Difficulty, tuple[Problem, ...]] = {
    Difficulty.EASY: (
        Problem(
            problem="Practice problem 1: Basic understanding check",
            topic="Fundamentals",
            difficulty=Difficulty.EASY,
            hint="Review the core concepts from the lesson",
        ),
        Problem(
            problem="Practice problem 2: Simple application",
            topic="Application",
            difficulty=Difficulty.EASY,
            hint="Apply what you learned in a straightforward way",
        ),
    ),
    Difficulty.MEDIUM: (
        Problem(
            problem="Practice problem 1: Standard problem",
            topic="Core Concept",
            difficulty=Difficulty.MEDIUM,
            hint="Consider how the concepts interact",
        ),
        Problem(
            problem="Practice problem 2: Problem with twist",
            topic="Application",
            difficulty=Difficulty.MEDIUM,
            hint="Think about edge cases and exceptions",
        ),
    ),
    Difficulty.HARD: (
        Problem(
            problem="Challenge problem 1: Complex scenario",
            topic="Advanced",
            difficulty=Difficulty.HARD,
            hint="Break down the problem into smaller parts",
        ),
        Problem(
            problem="Challenge problem 2: Multi-step solution",
            topic="Synthesis",
            difficulty=Difficulty.HARD,
            hint="Combine multiple concepts to solve",
        ),
    ),
}

_PROBLEM_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are an expert problem generator for adaptive learning. "
            "Create targeted practice problems.",
        ),
        (
            "human",
            "A student studying {topic} just completed a quiz with gaps in "
            "their understanding:\n\n{error_analysis}\n\n"
            "Generate 2-{max_problems} practice problems that directly target "
            "their weak areas.\nFocus on: {difficulty} difficulty level\n\n"
            "Make sure the problems are DIFFERENT from typical textbook "
            "questions. Include real-world applications when possible.\n\n"
            "Respond ONLY with JSON in this format:\n"
            '{{"problems": [{{"problem": "", "topic": "", '
            '"difficulty": "easy/medium/hard", "hint": ""}}]}}',
        ),
    ]
)


def _difficulty(value: str, default: Difficulty) -> Difficulty:
    try:
        return Difficulty(value.strip().lower())
    except ValueError:
        return default


class ProblemGenerator:
    """Generates up to ``max_follow_up_problems`` practice problems.

    Never raises for model failures: the canned set for the requested
    difficulty is returned instead.
    """

    def __init__(self, gateway: LLMGateway, config: PipelineConfig | None = None) -> None:
        self.gateway = gateway
        self.config = config or PipelineConfig()

    async def generate(
        self,
        error_analysis: str,
        topic: str,
        difficulty: Difficulty = Difficulty.MEDIUM,
    ) -> tuple[Problem, ...]:
        try:
            raw = await request_json(
                self.gateway,
                Purpose.GENERATION,
                _PROBLEM_PROMPT,
                self.config.problem_temperature,
                allow_array=True,
                topic=topic,
                error_analysis=error_analysis,
                difficulty=difficulty.value,
                max_problems=self.config.max_follow_up_problems,
            )
            output = validate_output(ProblemSetOutput, raw)
        except (GatewayError, ParseError, ValidationError) as exc:
            logger.warning(
                "ProblemGenerator: using canned %s problems: %s", difficulty.value, exc
            )
            return FALLBACK_PROBLEMS[difficulty]

        problems = tuple(
            Problem(
                problem=p.problem,
                topic=p.topic or topic,
                difficulty=_difficulty(p.difficulty, difficulty),
                hint=p.hint,
            )
            for p in output.problems[: self.config.max_follow_up_problems]
        )
        logger.debug("ProblemGenerator: %d %s problems", len(problems), difficulty.value)
        return problems
