"""Configuration dataclasses for the adaptive tutor.

Each config is a plain frozen ``dataclass`` with a ``validate()`` method that
raises ``ValueError`` on invalid combinations, plus ``to_dict()`` /
``from_dict()`` for round-tripping through JSON.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields
from typing import Any

from adaptive_tutor.domain.enums import Purpose

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
API_KEY_ENV_VAR = "OPENROUTER_API_KEY"

_DEFAULT_ROUTES: dict[str, str] = {
    Purpose.ANALYSIS.value: "openai/gpt-4.1-mini",
    Purpose.GENERATION.value: "openai/gpt-4.1",
    Purpose.TUTORING.value: "anthropic/claude-3.5-sonnet",
    Purpose.MOTIVATION.value: "anthropic/claude-3.5-sonnet",
}


# ===================================================================== #
#  Routing                                                               #
# ===================================================================== #

@dataclass(frozen=True)
class RoutingTable:
    """Static purpose -> model identifier table.

    The identifiers trade off cost, latency and quality; callers never see
    a functional difference between them.
    """

    routes: dict[str, str] = field(default_factory=lambda: dict(_DEFAULT_ROUTES))

    def __post_init__(self) -> None:
        if self.routes is None:
            object.__setattr__(self, "routes", dict(_DEFAULT_ROUTES))
        else:
            merged = dict(_DEFAULT_ROUTES)
            merged.update({_purpose_key(k): v for k, v in self.routes.items()})
            object.__setattr__(self, "routes", merged)

    def model_for(self, purpose: Purpose | str) -> str:
        """Return the model identifier serving *purpose*."""
        key = _purpose_key(purpose)
        try:
            return self.routes[key]
        except KeyError:
            raise ValueError(f"No route configured for purpose {key!r}") from None

    @property
    def model_ids(self) -> tuple[str, ...]:
        """Distinct model identifiers, in route order."""
        return tuple(dict.fromkeys(self.routes.values()))

    def validate(self) -> None:
        for purpose in Purpose:
            if not self.routes.get(purpose.value):
                raise ValueError(f"route for {purpose.value!r} must not be empty")

    def to_dict(self) -> dict[str, Any]:
        return dict(self.routes)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoutingTable:
        table = cls(routes={str(k): str(v) for k, v in data.items()})
        table.validate()
        return table


def _purpose_key(purpose: Purpose | str) -> str:
    return purpose.value if isinstance(purpose, Purpose) else str(purpose).lower()


# ===================================================================== #
#  Gateway Configuration                                                 #
# ===================================================================== #

@dataclass(frozen=True)
class GatewayConfig:
    """Settings for the OpenRouter-backed gateway.

    Attributes
    ----------
    base_url:
        OpenAI-compatible endpoint.
    api_key:
        API key.  Empty means "read ``OPENROUTER_API_KEY`` at build time".
    max_tokens:
        Maximum tokens per response.
    timeout:
        Per-call timeout in seconds; ``None`` leaves timeouts to the caller.
    app_title / app_referer:
        Attribution headers sent to OpenRouter.
    routing:
        The purpose -> model table.
    """

    base_url: str = OPENROUTER_BASE_URL
    api_key: str = ""
    max_tokens: int = 1500
    timeout: float | None = None
    app_title: str = "Adaptive Tutor"
    app_referer: str = "http://localhost:3000"
    routing: RoutingTable = field(default_factory=RoutingTable)

    def __post_init__(self) -> None:
        if isinstance(self.routing, dict):
            object.__setattr__(self, "routing", RoutingTable(routes=self.routing))
        elif self.routing is None:
            object.__setattr__(self, "routing", RoutingTable())

    def resolve_api_key(self) -> str:
        """Return the configured key, falling back to the environment."""
        return self.api_key or os.environ.get(API_KEY_ENV_VAR, "")

    def validate(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be >= 1, got {self.max_tokens}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        self.routing.validate()

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["routing"] = self.routing.to_dict()
        d.pop("api_key")
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GatewayConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Pipeline Configuration                                                #
# ===================================================================== #

@dataclass(frozen=True)
class PipelineConfig:
    """Parameters of the learning cycle.

    Attributes
    ----------
    quiz_size:
        Number of questions every generated quiz must contain.
    mastery_gain:
        Maximum mastery increase per quiz (scaled by the score).
    min_subtopics / max_subtopics:
        Requested size of the subtopic map.
    max_follow_up_problems:
        Upper bound on generated practice problems.
    recent_attempts_limit:
        How many past attempts the error analysis sees.
    *_temperature:
        Sampling temperature per stage.
    """

    quiz_size: int = 5
    mastery_gain: float = 0.15
    min_subtopics: int = 8
    max_subtopics: int = 15
    max_follow_up_problems: int = 3
    recent_attempts_limit: int = 5
    planning_temperature: float = 0.7
    lesson_temperature: float = 0.7
    quiz_temperature: float = 0.7
    evaluation_temperature: float = 0.3
    analysis_temperature: float = 0.5
    decision_temperature: float = 0.2
    problem_temperature: float = 0.8

    def validate(self) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        if self.quiz_size < 1:
            raise ValueError(f"quiz_size must be >= 1, got {self.quiz_size}")
        if not (0.0 <= self.mastery_gain <= 1.0):
            raise ValueError(f"mastery_gain must be in [0, 1], got {self.mastery_gain}")
        if not (1 <= self.min_subtopics <= self.max_subtopics):
            raise ValueError(
                "subtopic range must satisfy 1 <= min_subtopics <= max_subtopics, "
                f"got ({self.min_subtopics}, {self.max_subtopics})"
            )
        if self.max_follow_up_problems < 1:
            raise ValueError(
                f"max_follow_up_problems must be >= 1, got {self.max_follow_up_problems}"
            )
        if self.recent_attempts_limit < 0:
            raise ValueError(
                f"recent_attempts_limit must be >= 0, got {self.recent_attempts_limit}"
            )
        for f in fields(self):
            if f.name.endswith("_temperature"):
                value = getattr(self, f.name)
                if not (0.0 <= value <= 2.0):
                    raise ValueError(f"{f.name} must be in [0, 2], got {value}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PipelineConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Unified config loader                                                 #
# ===================================================================== #

_CONFIG_MAP: dict[str, type] = {
    "gateway": GatewayConfig,
    "pipeline": PipelineConfig,
}


def load_config_from_json(json_str: str) -> dict[str, Any]:
    """Parse a JSON string into a dict of typed config objects.

    Top-level keys name config sections (``gateway``, ``pipeline``).
    Unknown sections are preserved as raw values.
    """
    raw = json.loads(json_str)
    if not isinstance(raw, dict):
        raise ValueError("Top-level JSON must be an object")
    result: dict[str, Any] = {}
    for section, data in raw.items():
        cls = _CONFIG_MAP.get(section)
        if cls is not None and isinstance(data, dict):
            result[section] = cls.from_dict(data)
        else:
            result[section] = data
    return result
