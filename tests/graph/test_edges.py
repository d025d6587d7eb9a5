"""Tests for conditional edge functions."""

from __future__ import annotations

from adaptive_tutor.graph.edges import route_after_quiz, route_entry


class TestRouteEntry:

    def test_fresh_cycle_plans(self) -> None:
        assert route_entry({}) == "plan"

    def test_answers_without_previous_plans(self) -> None:
        assert route_entry({"answers": [1, 2], "previous": None}) == "plan"

    def test_previous_without_answers_plans(self) -> None:
        assert route_entry({"answers": None, "previous": object()}) == "plan"

    def test_previous_with_answers_restores(self) -> None:
        assert route_entry({"answers": [], "previous": object()}) == "restore"


class TestRouteAfterQuiz:

    def test_end_without_answers(self) -> None:
        assert route_after_quiz({"answers": None}) == "__end__"
        assert route_after_quiz({}) == "__end__"

    def test_evaluate_with_answers(self) -> None:
        assert route_after_quiz({"answers": [1, 3, 0, 0, 2]}) == "evaluate"
