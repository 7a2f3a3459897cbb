"""Structured logging for cache events using structlog.

Every cache event carries the rendered ``key``. Keys built from large
arguments can run to kilobytes, so a processor caps them before rendering.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

from mcache_core.constants import MAX_LOGGED_KEY_LENGTH

if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from mcache_core.config.settings import Settings

# Client libraries whose connection chatter stays at WARNING and above
QUIET_LOGGERS = ("redis", "asyncio", "diskcache")


def shorten_cache_key(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Cap an over-long ``key`` value, noting how much was cut."""
    key = event_dict.get("key")
    if isinstance(key, str) and len(key) > MAX_LOGGED_KEY_LENGTH:
        dropped = len(key) - MAX_LOGGED_KEY_LENGTH
        event_dict["key"] = f"{key[:MAX_LOGGED_KEY_LENGTH]}...(+{dropped} chars)"
    return event_dict


def configure_logging(settings: Settings) -> None:
    """Route structlog and stdlib logging through one root handler.

    The renderer (JSON or console) and root level come from settings.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(settings.log_format),
        ],
        foreign_pre_chain=shared,
    )
    _install_root_handler(formatter, _resolve_level(settings.log_level))


def bind_cache_context(**values: object) -> None:
    """Attach values (e.g. request_id) to every later cache event in this context."""
    bind_contextvars(**values)


def clear_cache_context() -> None:
    """Drop all values bound with bind_cache_context."""
    clear_contextvars()


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        shorten_cache_key,
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _install_root_handler(formatter: logging.Formatter, level: int) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def _resolve_level(level_name: str) -> int:
    """Map a level name to its logging constant, INFO when unknown."""
    return logging.getLevelNamesMapping().get(level_name.upper(), logging.INFO)
