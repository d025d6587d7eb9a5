"""Tests for the five-step curriculum planner."""

from __future__ import annotations

import json

import pytest

from adaptive_tutor.domain.entities import UserModel
from adaptive_tutor.domain.exceptions import GatewayError, ParseError, PlanningError
from adaptive_tutor.domain.plans import CurriculumResult, SubtopicMapResult, extract_next_subtopic
from adaptive_tutor.domain.values import EvaluationResult
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.services.planning import CurriculumPlanner
from tests.helpers.mock_llm import FailingChatModel, ScriptedChatModel, scripted_gateway

SUBTOPICS = {"subtopics": [{"id": f"s{i}", "name": f"Topic {i}", "prerequisites": []} for i in range(1, 9)]}
WEAKNESS = {"weakConcepts": ["Topic 2"], "strongConcepts": [], "criticalFailures": ["Topic 1"], "primaryFocus": "Topic 1"}
ENTRY = {"lessonId": "L1", "title": "Start", "subtopic": "Topic 1", "estimatedTime": 10, "skillsTargeted": ["a"]}


class TestFirstPass:

    @pytest.mark.asyncio
    async def test_returns_subtopic_map_only(
        self, demo_gateway: LLMGateway, demo_model: ScriptedChatModel, user_model: UserModel
    ) -> None:
        plan = await CurriculumPlanner(demo_gateway).plan(user_model)

        assert isinstance(plan, SubtopicMapResult)
        assert plan.subject == "Calculus"
        assert extract_next_subtopic(plan) == "Functions and Graphs"
        assert user_model.generated_subtopics == plan.subtopic_map
        assert len(demo_model.calls) == 1

    @pytest.mark.asyncio
    async def test_prompt_carries_subject_and_range(self, user_model: UserModel) -> None:
        gateway, model = scripted_gateway(json.dumps(SUBTOPICS))
        await CurriculumPlanner(gateway).plan(user_model)

        call = model.calls[0]
        assert "Subject chosen by user: Calculus" in call["user"]
        assert "8-15 subtopics" in call["system"]
        assert call["temperature"] == 0.7

    @pytest.mark.asyncio
    async def test_bare_list_is_accepted(self, user_model: UserModel) -> None:
        gateway, _ = scripted_gateway("```json\n" + json.dumps(SUBTOPICS["subtopics"]) + "\n```")
        plan = await CurriculumPlanner(gateway).plan(user_model)
        assert len(plan.subtopic_map) == 8

    @pytest.mark.asyncio
    async def test_dangling_prerequisites_only_warn(
        self, user_model: UserModel, caplog: pytest.LogCaptureFixture
    ) -> None:
        broken = {"subtopics": [{"id": "s1", "name": "A", "prerequisites": ["s0"]}]}
        gateway, _ = scripted_gateway(json.dumps(broken))
        with caplog.at_level("WARNING"):
            plan = await CurriculumPlanner(gateway).plan(user_model)
        assert plan.subtopic_map[0].prerequisites == ("s0",)
        messages = " ".join(r.message for r in caplog.records)
        assert "dangling" in messages
        assert "outside requested range" in messages


class TestFullPass:

    @pytest.mark.asyncio
    async def test_runs_all_five_steps(
        self,
        demo_gateway: LLMGateway,
        demo_model: ScriptedChatModel,
        user_model: UserModel,
        evaluation: EvaluationResult,
    ) -> None:
        plan = await CurriculumPlanner(demo_gateway).plan(user_model, evaluation)

        assert isinstance(plan, CurriculumResult)
        assert len(demo_model.calls) == 5
        assert plan.weakness_analysis.critical_failures == ("limit laws",)
        assert plan.curriculum[0].subtopic == "Limits"
        assert plan.notes == "Critical failures first."
        assert extract_next_subtopic(plan) == "Limits"
        assert "Final Test Results" in demo_model.calls[1]["user"]

    @pytest.mark.asyncio
    async def test_malformed_step_names_the_stage(
        self, user_model: UserModel, evaluation: EvaluationResult
    ) -> None:
        gateway, _ = scripted_gateway(
            json.dumps(SUBTOPICS), json.dumps(WEAKNESS), '{"curriculum": "not a list"}'
        )
        with pytest.raises(PlanningError) as exc_info:
            await CurriculumPlanner(gateway).plan(user_model, evaluation)
        assert exc_info.value.stage == "curriculum_draft"
        assert exc_info.value.details["stage"] == "curriculum_draft"

    @pytest.mark.asyncio
    async def test_unparseable_step_chains_parse_error(
        self, user_model: UserModel, evaluation: EvaluationResult
    ) -> None:
        gateway, _ = scripted_gateway(
            json.dumps(SUBTOPICS),
            json.dumps(WEAKNESS),
            json.dumps({"curriculum": [ENTRY]}),
            json.dumps({"optimizedCurriculum": [ENTRY]}),
            "I could not validate this curriculum.",
        )
        with pytest.raises(PlanningError) as exc_info:
            await CurriculumPlanner(gateway).plan(user_model, evaluation)
        assert exc_info.value.stage == "validation"
        assert isinstance(exc_info.value.__cause__, ParseError)

    @pytest.mark.asyncio
    async def test_unknown_final_subtopics_only_warn(
        self,
        user_model: UserModel,
        evaluation: EvaluationResult,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        stray = dict(ENTRY, subtopic="Not In Map")
        gateway, _ = scripted_gateway(
            json.dumps(SUBTOPICS),
            json.dumps(WEAKNESS),
            json.dumps({"curriculum": [ENTRY]}),
            json.dumps({"optimizedCurriculum": [ENTRY]}),
            json.dumps({"finalCurriculum": [stray], "notes": ""}),
        )
        with caplog.at_level("WARNING"):
            plan = await CurriculumPlanner(gateway).plan(user_model, evaluation)
        assert plan.curriculum[0].subtopic == "Not In Map"
        assert any("missing from the map" in r.message for r in caplog.records)


class TestFailures:

    @pytest.mark.asyncio
    async def test_gateway_error_propagates(self, user_model: UserModel) -> None:
        gateway = LLMGateway(FailingChatModel())
        with pytest.raises(GatewayError):
            await CurriculumPlanner(gateway).plan(user_model)

    @pytest.mark.asyncio
    async def test_topic_required(self) -> None:
        gateway, model = scripted_gateway(json.dumps(SUBTOPICS))
        with pytest.raises(PlanningError):
            await CurriculumPlanner(gateway).plan(UserModel(topic=""))
        assert model.calls == []
