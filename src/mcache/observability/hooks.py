"""Cache event hooks: structured logs and in-process counters."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from mcache_core.interfaces.hooks import CacheHook

logger = structlog.get_logger()


class LoggingCacheHook:
    """Emit one structlog event per cache event.

    Hits and misses log at DEBUG; store and codec failures at WARNING/ERROR
    since they mean the call ran uncached.
    """

    def on_hit(self, name: str, key: str) -> None:
        logger.debug("cache_hit", function=name, key=key)

    def on_miss(self, name: str, key: str) -> None:
        logger.debug("cache_miss", function=name, key=key)

    def on_store(self, name: str, key: str, ttl_ms: int) -> None:
        logger.debug("cache_stored", function=name, key=key, ttl_ms=ttl_ms)

    def on_error(self, name: str, key: str, stage: str, error: Exception) -> None:
        event = f"cache_{stage}_failed"
        if stage == "encode":
            logger.error(event, function=name, key=key, error=str(error))
        else:
            logger.warning(event, function=name, key=key, error=str(error))


@dataclass
class CacheStats:
    """Thread-safe counters of cache outcomes, per process."""

    hits: int = 0
    misses: int = 0
    stores: int = 0
    errors_by_stage: dict[str, int] = field(default_factory=dict)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def on_hit(self, name: str, key: str) -> None:
        with self._lock:
            self.hits += 1

    def on_miss(self, name: str, key: str) -> None:
        with self._lock:
            self.misses += 1

    def on_store(self, name: str, key: str, ttl_ms: int) -> None:
        with self._lock:
            self.stores += 1

    def on_error(self, name: str, key: str, stage: str, error: Exception) -> None:
        with self._lock:
            self.errors_by_stage[stage] = self.errors_by_stage.get(stage, 0) + 1

    @property
    def errors(self) -> int:
        """Total failures across all stages."""
        return sum(self.errors_by_stage.values())

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from the store."""
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def summary(self) -> dict[str, object]:
        """Return counters for structured logging."""
        with self._lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "stores": self.stores,
                "errors": dict(self.errors_by_stage),
                "hit_rate": round(self.hit_rate, 4),
            }

    def reset(self) -> None:
        """Zero all counters."""
        with self._lock:
            self.hits = 0
            self.misses = 0
            self.stores = 0
            self.errors_by_stage.clear()


class CompositeCacheHook:
    """Fan one event out to several hooks.

    A hook that raises is logged and skipped; the remaining hooks still run
    and the cached call is unaffected.
    """

    def __init__(self, hooks: Sequence[CacheHook]) -> None:
        """Initialize with the hooks to notify, in order."""
        self._hooks = list(hooks)

    def on_hit(self, name: str, key: str) -> None:
        self._dispatch("on_hit", name, key)

    def on_miss(self, name: str, key: str) -> None:
        self._dispatch("on_miss", name, key)

    def on_store(self, name: str, key: str, ttl_ms: int) -> None:
        self._dispatch("on_store", name, key, ttl_ms)

    def on_error(self, name: str, key: str, stage: str, error: Exception) -> None:
        self._dispatch("on_error", name, key, stage, error)

    def _dispatch(self, event: str, name: str, key: str, *extra: Any) -> None:
        for hook in self._hooks:
            try:
                getattr(hook, event)(name, key, *extra)
            except Exception:
                logger.exception(
                    "cache_hook_failed",
                    hook=type(hook).__name__,
                    hook_event=event,
                    function=name,
                    key=key,
                )


_stats = CacheStats()
_default_hooks: list[CacheHook] = [LoggingCacheHook(), _stats]


def get_stats() -> CacheStats:
    """Process-wide counters fed by every cached function."""
    return _stats


def default_hooks() -> list[CacheHook]:
    """Hooks attached to cached functions that do not name their own."""
    return list(_default_hooks)
