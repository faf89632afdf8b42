"""
Timespine Logging - structured logging for the series engines.

Thin layer over structlog. Applications call ``configure_logging()`` once at
startup; library code calls ``get_logger(__name__)`` and logs events with
structured fields. Importing timespine never configures structlog; the
level and renderer from ``TimespineSettings`` are applied only when the
application calls ``configure_logging()`` without explicit arguments.

Architecture:
    ::

        configure_logging(level="DEBUG", json_format=False)
              │
              ▼
        structlog processor chain:
          1. merge_contextvars
          2. add_log_level
          3. TimeStamper (iso)
          4. add_service_metadata
          5. JSONRenderer | ConsoleRenderer

        logger = get_logger(__name__)
        logger.debug("join_completed", strategy="merge", left=5, right=3, matched=3)

Examples:
    >>> from timespine.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=True, service="research")
    >>> get_logger(__name__).debug("resample_completed", groups=2)

Tags:
    logging, structlog, observability, timespine

Doc-Types:
    - API Reference
    - Observability Guide
"""

from __future__ import annotations

import logging
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from timespine.core.settings import get_settings

_SERVICE_NAME = "timespine"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str = "timespine",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); None uses
            ``TimespineSettings.log_level``
        json_format: True for JSON, False for console, None uses
            ``TimespineSettings.log_format``
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    settings = get_settings()
    if level is None:
        level = settings.log_level
    if json_format is None:
        json_format = settings.log_format == "json"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]
    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    renderer: Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger. Configuration is left to the application."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(pipeline="minute_bars", symbol="ES"):
            bars = trades.resample_and_agg(bucket, last_value)
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
