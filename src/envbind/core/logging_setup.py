"""Structured logging configuration for the envbind command line."""

from __future__ import annotations

import logging
from typing import Any, TextIO

import structlog

LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})
LOG_FORMATS = frozenset({"json", "console"})


def _resolve_log_level(level: str | None) -> int:
    candidate = (level or "warning").upper()
    value = logging.getLevelName(candidate)
    return value if isinstance(value, int) else logging.WARNING


def _renderer(fmt: str) -> Any:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(level: str = "warning", fmt: str = "console", stream: TextIO | None = None) -> None:
    """Route structlog and stdlib ``logging`` through one stderr handler.

    The engine logs with stdlib loggers under ``envbind``; the CLI logs with
    structlog. Both end up in the same ``ProcessorFormatter``.
    """
    min_level = _resolve_log_level(level)
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        timestamper,
    ]

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
    )

    handler = logging.StreamHandler(stream)
    handler.setLevel(min_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(fmt),
            foreign_pre_chain=shared_processors,
        )
    )

    # Replace rather than append so repeated calls do not duplicate output.
    envbind_logger = logging.getLogger("envbind")
    for existing in envbind_logger.handlers[:]:
        envbind_logger.removeHandler(existing)
    envbind_logger.setLevel(min_level)
    envbind_logger.propagate = False
    envbind_logger.addHandler(handler)


__all__ = ["LOG_FORMATS", "LOG_LEVELS", "configure_logging"]
