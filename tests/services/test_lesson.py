"""Tests for lesson generation."""

from __future__ import annotations

import json

import pytest

from adaptive_tutor.domain.entities import UserModel
from adaptive_tutor.domain.enums import Purpose
from adaptive_tutor.domain.exceptions import LessonGenerationError, ParseError
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.services.lesson import LessonGenerator
from tests.helpers.mock_llm import ScriptedChatModel, scripted_gateway


class TestLessonGenerator:

    @pytest.mark.asyncio
    async def test_structured_lesson(
        self, demo_gateway: LLMGateway, demo_model: ScriptedChatModel, user_model: UserModel
    ) -> None:
        lesson = await LessonGenerator(demo_gateway).generate("Functions and Graphs", user_model)

        assert lesson.title == "Functions and Graphs"
        assert lesson.level == "beginner"
        assert lesson.examples[0].steps == ("Substitute x = 3", "2*3 + 1 = 7")
        assert len(lesson.practice_problems) == 2
        assert lesson.ascii_visual
        assert 'Subtopic to teach: "Functions and Graphs"' in demo_model.calls[0]["user"]

    @pytest.mark.asyncio
    async def test_prompt_reflects_level_and_mastery(self) -> None:
        gateway, model = scripted_gateway(json.dumps({"title": "T", "explanation": "E"}))
        learner = UserModel(topic="Calculus", level="advanced", mastery={"limits": 0.9})

        await LessonGenerator(gateway).generate("Limits", learner)

        assert "Student Level: advanced" in model.calls[0]["user"]
        assert '"limits": 0.9' in model.calls[0]["user"]

    @pytest.mark.asyncio
    async def test_missing_fields_are_filled(self, user_model: UserModel) -> None:
        gateway, _ = scripted_gateway(json.dumps({"title": "T", "explanation": "E"}))
        lesson = await LessonGenerator(gateway).generate("Limits", user_model)

        assert lesson.subtopic == "Limits"
        assert lesson.level == "beginner"
        assert lesson.lesson_id.startswith("lesson-")
        assert lesson.objectives == ()

    @pytest.mark.asyncio
    async def test_routes_to_generation(self, user_model: UserModel) -> None:
        model = ScriptedChatModel(responses=[json.dumps({"title": "T", "explanation": "E"})])
        gateway = LLMGateway({"openai/gpt-4.1": model})
        lesson = await LessonGenerator(gateway).generate("Limits", user_model)
        assert lesson.title == "T"
        assert gateway.model_id_for(Purpose.GENERATION) == "openai/gpt-4.1"

    @pytest.mark.asyncio
    async def test_unparseable_reply(self, user_model: UserModel) -> None:
        gateway, _ = scripted_gateway("Sorry, I cannot write that lesson.")
        with pytest.raises(LessonGenerationError) as exc_info:
            await LessonGenerator(gateway).generate("Limits", user_model)
        err = exc_info.value
        assert err.subtopic == "Limits"
        assert err.details["stage"] == "lesson"
        assert isinstance(err.__cause__, ParseError)

    @pytest.mark.asyncio
    async def test_missing_required_fields(self, user_model: UserModel) -> None:
        gateway, _ = scripted_gateway(json.dumps({"objectives": ["x"]}))
        with pytest.raises(LessonGenerationError):
            await LessonGenerator(gateway).generate("Limits", user_model)
