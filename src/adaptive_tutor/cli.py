"""Command-line interface for the adaptive tutor.

Entry point
-----------
The ``main()`` function is registered as a console script in
``pyproject.toml``::

    [project.scripts]
    adaptive-tutor = "adaptive_tutor.cli:main"

Usage examples::

    adaptive-tutor cycle --topic Calculus --level beginner --demo
    adaptive-tutor cycle --topic Calculus --demo --answers 1,3,0,0,2
    adaptive-tutor cycle --topic "Linear Algebra" --config tutor.json --store progress.json
    adaptive-tutor info
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="adaptive-tutor",
        description="Adaptive Tutor -- run LLM-orchestrated learning cycles.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        default=False,
        help="Show version and exit.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available subcommands")

    # -- cycle -------------------------------------------------------------
    cycle_parser = subparsers.add_parser(
        "cycle",
        help="Run one learning cycle.",
        description=(
            "Plan, teach and quiz a topic.  With --answers the quiz is also "
            "graded and the learner adapted."
        ),
    )
    cycle_parser.add_argument("--topic", type=str, required=True, help="Subject to learn.")
    cycle_parser.add_argument(
        "--level",
        type=str,
        default="beginner",
        choices=["beginner", "intermediate", "advanced"],
        help="Declared learner level. (default: beginner)",
    )
    cycle_parser.add_argument("--user-id", type=str, default="cli-user", help="Learner id.")
    cycle_parser.add_argument(
        "--answers",
        type=str,
        default=None,
        help="Comma-separated option indices, one per question (e.g. '1,3,0,0,2').",
    )
    cycle_parser.add_argument(
        "--demo",
        action="store_true",
        default=False,
        help="Use the scripted offline Calculus model instead of OpenRouter.",
    )
    cycle_parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON config file with 'gateway' and 'pipeline' sections.",
    )
    cycle_parser.add_argument(
        "--store",
        type=str,
        default=None,
        help="JSON file to load progress from and save it back to.",
    )

    # -- info --------------------------------------------------------------
    subparsers.add_parser(
        "info",
        help="Show version and the model routing table.",
    )

    return parser


# =========================================================================
# Subcommand handlers
# =========================================================================


def _parse_answers(raw: str) -> list[int]:
    try:
        return [int(a.strip()) for a in raw.split(",") if a.strip()]
    except ValueError as exc:
        raise ValueError(f"--answers must be comma-separated integers: {raw!r}") from exc


def _load_config(path: str | None) -> dict[str, Any]:
    from adaptive_tutor.infrastructure.config import load_config_from_json

    if path is None:
        return {}
    return load_config_from_json(Path(path).read_text(encoding="utf-8"))


def _cmd_cycle(args: argparse.Namespace) -> int:
    """Handle the ``cycle`` subcommand."""
    from adaptive_tutor.agents import CycleOrchestrator
    from adaptive_tutor.domain import UserModel
    from adaptive_tutor.infrastructure.config import GatewayConfig, PipelineConfig
    from adaptive_tutor.infrastructure.llm import LLMGateway
    from adaptive_tutor.infrastructure.progress_store import InMemoryProgressStore

    config = _load_config(args.config)
    gateway_config = config.get("gateway") or GatewayConfig()
    pipeline_config = config.get("pipeline") or PipelineConfig()

    if args.demo:
        from adaptive_tutor.testing import calculus_demo_model

        gateway = LLMGateway(calculus_demo_model(), routing=gateway_config.routing)
    else:
        gateway = LLMGateway.from_config(gateway_config)

    store_path = Path(args.store) if args.store else None
    if store_path is not None and store_path.exists():
        store = InMemoryProgressStore.from_json(store_path.read_text(encoding="utf-8"))
    else:
        store = InMemoryProgressStore()

    user_model = UserModel(
        topic=args.topic,
        level=args.level,
        user_id=args.user_id,
        mastery=store.get_mastery(args.user_id, args.topic),
    )
    orchestrator = CycleOrchestrator(gateway, pipeline_config, store)

    async def _run() -> Any:
        ready = await orchestrator.run_cycle(user_model)
        if args.answers is None:
            return ready
        return await orchestrator.run_cycle(
            user_model, answers=_parse_answers(args.answers), previous=ready
        )

    result = asyncio.run(_run())
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

    if store_path is not None:
        store_path.write_text(store.to_json(), encoding="utf-8")
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    """Handle the ``info`` subcommand."""
    from adaptive_tutor import __version__
    from adaptive_tutor.infrastructure.config import API_KEY_ENV_VAR, GatewayConfig

    config = GatewayConfig()
    print(f"Adaptive Tutor v{__version__}")
    print()
    print(f"Endpoint: {config.base_url}")
    print(f"API key:  {'set' if config.resolve_api_key() else 'missing'} (${API_KEY_ENV_VAR})")
    print()
    print("Model routing:")
    for purpose, model_id in config.routing.to_dict().items():
        print(f"  {purpose:<12} -> {model_id}")
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  Defaults to ``sys.argv[1:]``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from adaptive_tutor import __version__
        print(f"adaptive-tutor {__version__}")
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    handlers: dict[str, Any] = {
        "cycle": _cmd_cycle,
        "info": _cmd_info,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        exit_code = handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        exit_code = 130
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)
