"""Tolerant JSON extraction for model output.

Models wrap JSON in prose, fence it in Markdown, or emit almost-JSON with
trailing commas, smart quotes and bare keys.  :func:`parse_llm_json`
recovers the value in a fixed order of attempts:

1. Non-text input is returned unchanged.
2. The body of a ```` ```json ```` (or plain ```` ``` ````) fence.
3. Otherwise the span from the first ``{`` to the last ``}``.
4. No candidate -> :class:`ParseError` with the first 500 input characters.
5. Strict ``json.loads``.
6. Textual repairs (:func:`repair_json_text`), then ``json.loads`` again.
7. Still failing -> :class:`ParseError` with both candidates and both errors.

Everything here is pure: no I/O, no randomness, no network.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from adaptive_tutor.domain.exceptions import ParseError

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 500
_REPAIRED_SNIPPET_LENGTH = 1500

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.IGNORECASE | re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_SINGLE_QUOTED_RE = re.compile(r"([:{\[,\s])'([^']*)'")
_BARE_KEY_RE = re.compile(r"([,{\s])([A-Za-z0-9_\-]+)\s*:")
_REPEATED_COMMA_RE = re.compile(r",\s*,")

_SMART_DOUBLE = str.maketrans({"“": '"', "”": '"'})
_SMART_SINGLE = str.maketrans({"‘": "'", "’": "'"})


def extract_json_candidate(raw: str) -> str | None:
    """Return the JSON-shaped region of *raw*, or ``None`` if there is none."""
    fence = _FENCE_RE.search(raw)
    if fence:
        candidate = fence.group(1).strip()
        if candidate:
            return candidate

    start = raw.find("{")
    end = raw.rfind("}")
    if start != -1 and end != -1 and end > start:
        return raw[start : end + 1]
    return None


def repair_json_text(candidate: str) -> str:
    """Apply the best-effort textual repairs, in order."""
    repaired = _TRAILING_COMMA_RE.sub(r"\1", candidate)
    repaired = repaired.translate(_SMART_DOUBLE).translate(_SMART_SINGLE)
    repaired = _SINGLE_QUOTED_RE.sub(r'\1"\2"', repaired)
    repaired = _BARE_KEY_RE.sub(r'\1"\2":', repaired)
    repaired = _REPEATED_COMMA_RE.sub(",", repaired)
    return repaired


def parse_llm_json(text: Any) -> Any:
    """Recover a JSON value from raw model output.

    Parameters
    ----------
    text:
        Raw model output.  Anything that is not a string (an already
        decoded ``dict`` or ``list``) is returned as-is.

    Returns
    -------
    Any
        The decoded JSON value.

    Raises
    ------
    ParseError
        If no JSON-shaped region exists, or it cannot be decoded even after
        repairs.
    """
    if text is None:
        raise ParseError("No text provided to parse_llm_json")
    if not isinstance(text, (str, bytes)):
        return text

    raw = text.decode("utf-8", errors="replace") if isinstance(text, bytes) else text

    candidate = extract_json_candidate(raw)
    if candidate is None:
        snippet = raw[:SNIPPET_LENGTH]
        raise ParseError(
            f"No JSON-like block found in LLM output. Raw start: {snippet}",
            details={"snippet": snippet},
        )

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as first:
        repaired = repair_json_text(candidate)
        try:
            value = json.loads(repaired)
        except json.JSONDecodeError as second:
            snippet = repaired[:_REPAIRED_SNIPPET_LENGTH]
            raise ParseError(
                f"Failed to parse LLM JSON. First error: {first}; "
                f"After repairs: {second}. Candidate (repaired): {snippet}",
                original=candidate,
                repaired=repaired,
                first_error=str(first),
                second_error=str(second),
                details={"snippet": snippet},
            ) from second
        logger.warning("parse_llm_json: parsed after repairs (%s)", first)
        return value
