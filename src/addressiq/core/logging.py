"""
Structured logging for the AddressIQ backend.

Every log line is a structlog event with key/value fields. Request-scoped
fields (``request_id``, ``postcode``, ``house_number``) are bound through
contextvars so that provider adapters running concurrently under one
request all carry them without passing a logger around.

Features:
    - JSON output for log aggregation, coloured console for development
    - ``debug|info|warn|error`` level selector (``warn`` means WARNING)
    - Context binding via :func:`bind_context` and :class:`LogContext`

Examples:
    >>> from addressiq.core.logging import configure_logging, get_logger
    >>> configure_logging(level="debug", json_format=False)
    >>> log = get_logger(__name__)
    >>> log.debug("provider_soft_failure", source="weather", error_kind="Timeout")

Tags:
    logging, structlog, observability, addressiq

Doc-Types:
    api-reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from addressiq.core.errors import ConfigError

_SERVICE_NAME = "addressiq-backend"

LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def resolve_level(level: str) -> int:
    """Map a ``LOG_LEVEL`` value onto a stdlib logging level.

    Raises:
        ConfigError: for anything outside ``debug|info|warn|error``.
    """
    try:
        return LEVELS[level.strip().lower()]
    except KeyError:
        raise ConfigError(f"invalid log level {level!r}; expected debug, info, warn or error") from None


def _add_service_metadata(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str = "info",
    json_format: bool | None = None,
    service: str = "addressiq-backend",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the process.

    Args:
        level: ``debug``, ``info``, ``warn`` or ``error``
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    numeric_level = resolve_level(level)

    if json_format is None:
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn and httpx log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs of this task."""
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
        async with LogContext(postcode="3541ED", house_number="53"):
            log.info("aggregation_started")
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self._context.keys())

    async def __aenter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    async def __aexit__(self, *args: Any) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "LEVELS",
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "resolve_level",
    "unbind_context",
]
