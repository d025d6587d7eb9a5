"""Shared plumbing for the model-backed stages.

Every stage follows the same shape: render a ``ChatPromptTemplate`` into a
system + user prompt pair, send it through the gateway, recover JSON with
the tolerant parser, and validate it against a pydantic schema.
"""

from __future__ import annotations

import json
import math
from typing import Any, TypeVar

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel

from adaptive_tutor.domain.enums import Purpose
from adaptive_tutor.infrastructure.llm import LLMGateway
from adaptive_tutor.infrastructure.parsing import parse_llm_json

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def to_prompt_json(value: Any) -> str:
    """Render *value* as compact JSON for embedding in a prompt."""
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    elif isinstance(value, (list, tuple)):
        value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
    return json.dumps(value, ensure_ascii=False, default=str)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(math.floor(value + 0.5))


def to_percent(fraction: float) -> int:
    """A 0-1 fraction as a whole percentage, rounding halves up."""
    return round_half_up(fraction * 100)


def render_prompt(prompt: ChatPromptTemplate, **variables: Any) -> tuple[str, str]:
    """Return the ``(system, user)`` texts of a two-message template."""
    system, human = prompt.format_messages(**variables)
    return str(system.content), str(human.content)


def parse_reply(text: str, allow_array: bool = False) -> Any:
    """Decode a model reply.

    With *allow_array*, a reply that is itself a JSON array is decoded
    directly; :func:`parse_llm_json` only looks for objects outside fences.
    """
    if allow_array:
        stripped = text.strip()
        if stripped.startswith("["):
            try:
                return json.loads(stripped)
            except json.JSONDecodeError:
                return parse_llm_json(text)
    return parse_llm_json(text)


async def request_json(
    gateway: LLMGateway,
    purpose: Purpose,
    prompt: ChatPromptTemplate,
    temperature: float,
    allow_array: bool = False,
    **variables: Any,
) -> Any:
    """Call the model and recover its JSON reply.

    Raises ``GatewayError`` from the call and ``ParseError`` from parsing.
    """
    system, user = render_prompt(prompt, **variables)
    text = await gateway.invoke(purpose, system, user, temperature)
    return parse_reply(text, allow_array=allow_array)


def validate_output(schema: type[SchemaT], value: Any) -> SchemaT:
    """Validate a decoded reply; a bare list is accepted for single-list schemas."""
    if isinstance(value, list):
        required = [name for name, f in schema.model_fields.items() if f.is_required()]
        if len(required) == 1:
            field_info = schema.model_fields[required[0]]
            value = {field_info.alias or required[0]: value}
    return schema.model_validate(value)
