"""Structured logging with run_id support.

Uses structlog for structured logging with JSON or console output.
Every log entry includes a run_id so all lines emitted by one analytics
run (one CLI invocation, one dashboard recompute) can be grouped.

Library modules log through ``logging.getLogger(__name__)``; once
``setup_logging`` has run, those records flow through the same
structlog processors.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

# Context var for run_id propagation
_run_id: ContextVar[str] = ContextVar("run_id", default="")


def get_run_id() -> str:
    """Get current run ID from context."""
    rid = _run_id.get()
    if not rid:
        rid = str(uuid.uuid4())
        _run_id.set(rid)
    return rid


def set_run_id(run_id: str) -> None:
    """Set run ID in context."""
    _run_id.set(run_id)


def new_run_id() -> str:
    """Generate and set a new run ID."""
    rid = str(uuid.uuid4())
    _run_id.set(rid)
    return rid


def _add_run_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add run_id to every log entry."""
    event_dict["run_id"] = get_run_id()
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: str = "console",
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for machine consumption, "console" for development.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_run_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: Any
    if format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route plain stdlib records (library modules) through structlog too.
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
