"""Observability: structured logging, cache hooks, and tracing."""

from mcache.observability.hooks import (
    CacheStats,
    CompositeCacheHook,
    LoggingCacheHook,
    default_hooks,
    get_stats,
)
from mcache.observability.logging import (
    bind_cache_context,
    clear_cache_context,
    configure_logging,
)
from mcache.observability.tracing import (
    cache_span,
    configure_tracing,
    disable_tracing,
    get_tracer,
    use_tracer,
)

__all__ = [
    "CacheStats",
    "CompositeCacheHook",
    "LoggingCacheHook",
    "bind_cache_context",
    "cache_span",
    "clear_cache_context",
    "configure_logging",
    "configure_tracing",
    "default_hooks",
    "disable_tracing",
    "get_stats",
    "get_tracer",
    "use_tracer",
]
