"""Tests for reply decoding and number formatting shared by the model-backed stages."""

from __future__ import annotations

import pytest

from adaptive_tutor.domain.exceptions import ParseError
from adaptive_tutor.services.base import parse_reply, round_half_up, to_percent


class TestParseReply:

    def test_bare_array_when_allowed(self) -> None:
        reply = ' [{"problem": "P1"}, {"problem": "P2"}]\n'
        assert parse_reply(reply, allow_array=True) == [{"problem": "P1"}, {"problem": "P2"}]

    def test_bare_array_not_allowed_uses_object_span(self) -> None:
        with pytest.raises(ParseError):
            parse_reply('[{"problem": "P1"}, {"problem": "P2"}]')

    def test_broken_array_falls_back_to_tolerant_parser(self) -> None:
        assert parse_reply('[{"problem": "P1",}]', allow_array=True) == {"problem": "P1"}

    def test_objects_unaffected(self) -> None:
        assert parse_reply('Sure: {"a": 1}', allow_array=True) == {"a": 1}


class TestRounding:

    @pytest.mark.parametrize(
        ("value", "expected"), [(12.5, 13), (0.5, 1), (2.5, 3), (12.49, 12), (0.0, 0)]
    )
    def test_round_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected

    @pytest.mark.parametrize(("fraction", "expected"), [(0.125, 13), (0.42, 42), (1.0, 100)])
    def test_to_percent(self, fraction: float, expected: int) -> None:
        assert to_percent(fraction) == expected
