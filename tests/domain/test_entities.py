"""Tests for the UserModel entity."""

from __future__ import annotations

import pytest

from adaptive_tutor.domain.entities import UserModel, mean_mastery
from adaptive_tutor.domain.enums import Level
from adaptive_tutor.domain.values import Subtopic


class TestUserModel:

    def test_level_string_is_coerced(self) -> None:
        assert UserModel(topic="Calculus", level="Advanced").level is Level.ADVANCED  # type: ignore[arg-type]

    def test_defaults(self) -> None:
        model = UserModel(topic="Calculus")
        assert model.level is Level.BEGINNER
        assert model.mastery == {}
        assert model.generated_subtopics is None

    def test_mastery_for(self) -> None:
        model = UserModel(topic="Calculus", mastery={"a": 0.4, "b": 0.8})
        assert abs(model.mastery_for(["a", "b"]) - 0.6) < 1e-9
        assert model.mastery_for(["a", "unknown"]) == 0.2
        assert model.mastery_for([]) == 0.0

    def test_mean_mastery_ignores_concepts_outside_the_quiz(self) -> None:
        prior = {"limit laws": 0.6, "one-sided limits": 0.8, "graphs": 0.0}
        assert mean_mastery(prior, ("limit laws", "one-sided limits")) == pytest.approx(0.7)
        assert mean_mastery({}, ("limit laws",)) == 0.0
        assert mean_mastery(prior, ()) == 0.0

    def test_round_trip(self) -> None:
        model = UserModel(
            topic="Calculus",
            level=Level.INTERMEDIATE,
            user_id="u1",
            mastery={"limits": 0.5},
            generated_subtopics=(Subtopic("s1", "Limits"),),
        )
        d = model.to_dict()
        assert d["userId"] == "u1"
        assert d["generatedSubtopics"] == [{"id": "s1", "name": "Limits", "prerequisites": []}]
        assert UserModel.from_dict(d) == model

    def test_to_dict_omits_missing_subtopics(self) -> None:
        assert "generatedSubtopics" not in UserModel(topic="Calculus").to_dict()
