"""
Structured logging configuration using structlog wrapping stdlib.

Provides JSON-formatted structured log output in production and
human-readable console output in development. The planner itself only
emits events (plan_created, skill_match_failed, safety_downgrade, ...);
the host application decides where they go by calling setup_logging().
Every event names the subpackage that emitted it in ``component``
("planner", "skills", ...).

Usage:
    from voiceos.logging_config import setup_logging
    setup_logging()
"""

from __future__ import annotations

import logging
import os
import sys

import structlog


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    if level is None:
        level = os.environ.get("VOICEOS_LOG_LEVEL", "INFO")

    if json_output is None:
        json_output = os.environ.get("VOICEOS_LOG_FORMAT", "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)


ROOT_COMPONENT = "voiceos"


def component_for(name: str | None) -> str:
    """Subpackage a logger belongs to: "voiceos.planner.slot_filling" -> "planner"."""
    if not name:
        return ROOT_COMPONENT
    parts = name.split(".")
    if parts[0] != ROOT_COMPONENT or len(parts) < 3:
        return ROOT_COMPONENT
    return parts[1]


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger whose events carry a ``component`` field."""
    return structlog.get_logger(name, component=component_for(name))


__all__ = ["ROOT_COMPONENT", "component_for", "get_logger", "setup_logging"]
