"""Structured logging with trace_id support.

Uses structlog for structured logging with JSON or console output.
Every log entry includes a trace_id; the mutation dispatcher opens a new one
per dispatched operation so gate, submit and refresh lines correlate.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

_trace_id: ContextVar[str] = ContextVar("trace_id", default="")


def get_trace_id() -> str:
    """Get current trace ID from context."""
    tid = _trace_id.get()
    if not tid:
        tid = str(uuid.uuid4())
        _trace_id.set(tid)
    return tid


def new_trace_id() -> str:
    """Generate and set a new trace ID."""
    tid = str(uuid.uuid4())
    _trace_id.set(tid)
    return tid


def _add_trace_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add trace_id to every log entry."""
    event_dict["trace_id"] = get_trace_id()
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: str = "json",
) -> None:
    """Configure structured logging for the application.

    Stdlib loggers (``logging.getLogger(__name__)``) used by every module
    are routed through structlog's formatter.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for machine-readable output, "console" for humans.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_trace_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
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

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)
