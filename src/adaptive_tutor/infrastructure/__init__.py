"""Infrastructure: tolerant parsing, configuration, the model gateway, and
the progress-store collaborator."""

from adaptive_tutor.infrastructure.config import (
    GatewayConfig,
    PipelineConfig,
    RoutingTable,
    load_config_from_json,
)
from adaptive_tutor.infrastructure.parsing import parse_llm_json, repair_json_text
from adaptive_tutor.infrastructure.progress_store import (
    InMemoryProgressStore,
    ProgressStore,
)

__all__ = [
    "GatewayConfig",
    "PipelineConfig",
    "RoutingTable",
    "load_config_from_json",
    "parse_llm_json",
    "repair_json_text",
    "InMemoryProgressStore",
    "ProgressStore",
]
