"""Tests for the tolerant model-output JSON parser."""

from __future__ import annotations

import pytest

from adaptive_tutor.domain.exceptions import ParseError
from adaptive_tutor.infrastructure.parsing import (
    SNIPPET_LENGTH,
    extract_json_candidate,
    parse_llm_json,
    repair_json_text,
)


class TestExtractCandidate:

    def test_fenced_json_block(self) -> None:
        raw = 'Sure!\n```json\n{"a": 1}\n```\nBye'
        assert extract_json_candidate(raw) == '{"a": 1}'

    def test_plain_fence(self) -> None:
        assert extract_json_candidate('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_fence_tag_is_case_insensitive(self) -> None:
        assert extract_json_candidate('```JSON\n{"a": 1}\n```') == '{"a": 1}'

    def test_brace_span_without_fence(self) -> None:
        raw = 'The answer is {"a": {"b": 2}} as requested.'
        assert extract_json_candidate(raw) == '{"a": {"b": 2}}'

    def test_empty_fence_falls_back_to_braces(self) -> None:
        raw = '``` ``` then {"a": 1}'
        assert extract_json_candidate(raw) == '{"a": 1}'

    def test_no_candidate(self) -> None:
        assert extract_json_candidate("no json here") is None


class TestRepairs:

    def test_trailing_commas(self) -> None:
        assert repair_json_text('{"a": [1, 2,], "b": 3,}') == '{"a": [1, 2], "b": 3}'

    def test_smart_quotes(self) -> None:
        assert repair_json_text("{“a”: 1}") == '{"a": 1}'

    def test_single_quoted_strings(self) -> None:
        assert repair_json_text("{'a': 'b'}") == '{"a": "b"}'

    def test_bare_keys(self) -> None:
        assert repair_json_text("{a: 1, b_c: 2}") == '{"a": 1, "b_c": 2}'

    def test_repeated_commas(self) -> None:
        assert repair_json_text('{"a": 1,, "b": 2}') == '{"a": 1, "b": 2}'


class TestParseLlmJson:

    def test_strict_json(self) -> None:
        assert parse_llm_json('{"a": 1, "b": [true, null]}') == {"a": 1, "b": [True, None]}

    def test_prose_wrapped(self) -> None:
        assert parse_llm_json('Here you go: {"ok": true} hope it helps') == {"ok": True}

    def test_fenced_with_trailing_comma(self) -> None:
        raw = '```json\n{"items": [1, 2, 3,],}\n```'
        assert parse_llm_json(raw) == {"items": [1, 2, 3]}

    def test_bare_keys_and_single_quotes(self) -> None:
        assert parse_llm_json("{name: 'Limits', id: 's2'}") == {"name": "Limits", "id": "s2"}

    def test_non_text_returned_unchanged(self) -> None:
        value = {"already": "decoded"}
        assert parse_llm_json(value) is value
        assert parse_llm_json([1, 2]) == [1, 2]

    def test_bytes_are_decoded(self) -> None:
        assert parse_llm_json(b'{"a": 1}') == {"a": 1}

    def test_none_raises(self) -> None:
        with pytest.raises(ParseError):
            parse_llm_json(None)

    def test_no_json_raises_with_snippet(self) -> None:
        raw = "x" * (SNIPPET_LENGTH + 100)
        with pytest.raises(ParseError) as exc_info:
            parse_llm_json(raw)
        assert exc_info.value.details["snippet"] == "x" * SNIPPET_LENGTH
        assert exc_info.value.details["stage"] == "parse"

    def test_unrepairable_raises_with_both_errors(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_llm_json('{"a": [1, 2}')
        err = exc_info.value
        assert err.original == '{"a": [1, 2}'
        assert err.first_error
        assert err.second_error
        assert "First error" in str(err)

    def test_repaired_parse_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING"):
            assert parse_llm_json('{"a": 1,}') == {"a": 1}
        assert any("after repairs" in r.message for r in caplog.records)
