"""OpenRouter chat model for the adaptive tutor.

Wraps the ``openai`` Python SDK, pointed at OpenRouter's OpenAI-compatible
endpoint, as a LangChain ``BaseChatModel`` so it plugs into
:class:`~adaptive_tutor.infrastructure.llm.LLMGateway`.

Requires the ``openai`` package (``pip install openai``).
"""

from __future__ import annotations

import logging
from typing import Any

import openai
from langchain_core.callbacks import (
    AsyncCallbackManagerForLLMRun,
    CallbackManagerForLLMRun,
)
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import ConfigDict, PrivateAttr

from adaptive_tutor.infrastructure.config import OPENROUTER_BASE_URL

logger = logging.getLogger(__name__)


def _to_openai_messages(messages: list[BaseMessage]) -> list[dict[str, str]]:
    converted = []
    for msg in messages:
        if isinstance(msg, SystemMessage):
            role = "system"
        elif isinstance(msg, AIMessage):
            role = "assistant"
        elif isinstance(msg, HumanMessage):
            role = "user"
        else:
            role = "user"
        converted.append({"role": role, "content": str(msg.content)})
    return converted


class OpenRouterChatModel(BaseChatModel):
    """Chat model backed by an OpenRouter model identifier.

    Parameters
    ----------
    model_name:
        OpenRouter model id (e.g. ``"openai/gpt-4.1-mini"``).
    api_key:
        OpenRouter API key.
    base_url:
        Endpoint; defaults to OpenRouter.
    temperature:
        Default sampling temperature (overridable per call).
    max_tokens:
        Maximum tokens per response.
    app_title / app_referer:
        Attribution headers.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    model_name: str
    api_key: str = ""
    base_url: str = OPENROUTER_BASE_URL
    temperature: float = 0.7
    max_tokens: int = 1500
    app_title: str = "Adaptive Tutor"
    app_referer: str = "http://localhost:3000"

    _client: Any = PrivateAttr(default=None)
    _async_client: Any = PrivateAttr(default=None)

    @property
    def _llm_type(self) -> str:
        return "openrouter"

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {
            "model_name": self.model_name,
            "base_url": self.base_url,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def _client_kwargs(self) -> dict[str, Any]:
        if not self.api_key:
            raise openai.OpenAIError(
                "OpenRouter API key not configured (set OPENROUTER_API_KEY)"
            )
        return {
            "api_key": self.api_key,
            "base_url": self.base_url,
            "default_headers": {
                "HTTP-Referer": self.app_referer,
                "X-Title": self.app_title,
            },
        }

    def _request(self, messages: list[BaseMessage], stop: list[str] | None, **kwargs: Any) -> dict:
        request: dict[str, Any] = {
            "model": self.model_name,
            "messages": _to_openai_messages(messages),
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
        }
        if stop:
            request["stop"] = stop
        return request

    def _to_result(self, response: Any) -> ChatResult:
        if not response.choices:
            raise openai.OpenAIError(f"{self.model_name} returned no choices")
        choice = response.choices[0]
        usage: dict[str, int] = {}
        if response.usage is not None:
            usage = {
                "input_tokens": response.usage.prompt_tokens,
                "output_tokens": response.usage.completion_tokens,
            }
        return ChatResult(
            generations=[
                ChatGeneration(
                    message=AIMessage(content=choice.message.content or ""),
                    generation_info={
                        "finish_reason": choice.finish_reason or "",
                        "usage": usage,
                    },
                )
            ],
            llm_output={"model": getattr(response, "model", self.model_name)},
        )

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: CallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> ChatResult:
        if self._client is None:
            self._client = openai.OpenAI(**self._client_kwargs())
        response = self._client.chat.completions.create(
            **self._request(messages, stop, **kwargs)
        )
        return self._to_result(response)

    async def _agenerate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: AsyncCallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> ChatResult:
        if self._async_client is None:
            self._async_client = openai.AsyncOpenAI(**self._client_kwargs())
        response = await self._async_client.chat.completions.create(
            **self._request(messages, stop, **kwargs)
        )
        logger.debug("OpenRouterChatModel: %s responded", self.model_name)
        return self._to_result(response)
