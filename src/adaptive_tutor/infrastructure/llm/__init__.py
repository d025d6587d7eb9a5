"""LLM invocation gateway for the adaptive tutor.

Every model call in the pipeline goes through :class:`LLMGateway`, which
gives all stages one contract::

    text = await gateway.invoke(Purpose.ANALYSIS, system_prompt, user_prompt, 0.5)

The ``purpose`` selects a model identifier from a static
:class:`~adaptive_tutor.infrastructure.config.RoutingTable`.  The gateway
is built explicitly and injected into each stage, so tests can substitute
a deterministic chat model.

Public API
----------
LLMGateway
    Purpose-routed ``invoke`` over LangChain chat models.
GatewayRequest
    Value record of one outbound call.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from adaptive_tutor.domain.enums import Purpose
from adaptive_tutor.domain.exceptions import GatewayError
from adaptive_tutor.infrastructure.config import GatewayConfig, RoutingTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayRequest:
    """One outbound model call."""

    purpose: Purpose
    system_prompt: str
    user_prompt: str
    temperature: float = 0.7


class LLMGateway:
    """Uniform, purpose-routed call contract over LangChain chat models.

    Parameters
    ----------
    models:
        Either a single ``BaseChatModel`` serving every model identifier, or
        a mapping from model identifier to chat model.
    routing:
        Purpose -> model identifier table.  Defaults to the built-in table.
    default_model:
        Used for model identifiers missing from a *models* mapping.
    timeout:
        Optional per-call timeout in seconds.  A timeout is reported as a
        :class:`GatewayError`.

    No retries are performed; retry policy belongs to callers.
    """

    def __init__(
        self,
        models: BaseChatModel | Mapping[str, BaseChatModel],
        routing: RoutingTable | None = None,
        default_model: BaseChatModel | None = None,
        timeout: float | None = None,
    ) -> None:
        if isinstance(models, BaseChatModel):
            self._models: dict[str, BaseChatModel] = {}
            self._default = models
        else:
            self._models = dict(models)
            self._default = default_model
            if not self._models and default_model is None:
                raise ValueError("LLMGateway requires at least one chat model")
        self.routing = routing or RoutingTable()
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: GatewayConfig) -> LLMGateway:
        """Build an OpenRouter-backed gateway, one chat model per model id."""
        from adaptive_tutor.infrastructure.llm.openrouter import OpenRouterChatModel

        config.validate()
        api_key = config.resolve_api_key()
        models = {
            model_id: OpenRouterChatModel(
                model_name=model_id,
                api_key=api_key,
                base_url=config.base_url,
                max_tokens=config.max_tokens,
                app_title=config.app_title,
                app_referer=config.app_referer,
            )
            for model_id in config.routing.model_ids
        }
        logger.info("LLMGateway: built %d OpenRouter models", len(models))
        return cls(models, routing=config.routing, timeout=config.timeout)

    def model_id_for(self, purpose: Purpose) -> str:
        return self.routing.model_for(purpose)

    def _model_for(self, model_id: str) -> BaseChatModel:
        model = self._models.get(model_id, self._default)
        if model is None:
            raise GatewayError(
                f"No chat model registered for {model_id!r}",
                model_id=model_id,
            )
        return model

    async def invoke(
        self,
        purpose: Purpose,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
    ) -> str:
        """Send one system + user message pair and return the reply text.

        Raises
        ------
        GatewayError
            If the call raises, times out, or yields no text.
        """
        model_id = self.model_id_for(purpose)
        model = self._model_for(model_id)
        messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]
        runnable = model.bind(temperature=temperature)

        logger.debug(
            "LLMGateway: %s -> %s (temperature=%.2f)", purpose.value, model_id, temperature
        )
        try:
            if self._timeout is None:
                message = await runnable.ainvoke(messages)
            else:
                message = await asyncio.wait_for(
                    runnable.ainvoke(messages), timeout=self._timeout
                )
        except asyncio.TimeoutError as exc:
            raise GatewayError(
                f"Model call timed out after {self._timeout}s ({model_id})",
                purpose=purpose.value,
                model_id=model_id,
                upstream_message="timeout",
            ) from exc
        except Exception as exc:
            logger.warning("LLMGateway: %s call to %s failed: %s", purpose.value, model_id, exc)
            raise GatewayError(
                f"Model call failed ({model_id}): {exc}",
                purpose=purpose.value,
                model_id=model_id,
                upstream_message=str(exc),
            ) from exc

        text = _message_text(message)
        if not text.strip():
            raise GatewayError(
                f"Model {model_id} returned no usable content",
                purpose=purpose.value,
                model_id=model_id,
            )
        return text

    async def send(self, request: GatewayRequest) -> str:
        """Invoke from a :class:`GatewayRequest` record."""
        return await self.invoke(
            request.purpose,
            request.system_prompt,
            request.user_prompt,
            request.temperature,
        )

    def __repr__(self) -> str:
        return f"LLMGateway(routes={self.routing.to_dict()!r})"


def _message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    if content is None:
        return ""
    return str(content)


__all__ = ["GatewayRequest", "LLMGateway"]
