"""mcache: cache-aside decorators backed by a shared key-value store."""

from mcache.decorator import aget_or_compute, cached, get_or_compute, render_key
from mcache.observability.hooks import CacheStats, get_stats
from mcache_core.exceptions import (
    BindingError,
    CodecError,
    InitializationError,
    McacheError,
    StoreError,
    TemplateError,
)
from mcache_core.handle import get_store, init, init_from_settings, is_initialized, reset
from mcache_core.template import KeyTemplate, compile_template

__all__ = [
    "BindingError",
    "CacheStats",
    "CodecError",
    "InitializationError",
    "KeyTemplate",
    "McacheError",
    "StoreError",
    "TemplateError",
    "aget_or_compute",
    "cached",
    "compile_template",
    "get_or_compute",
    "get_stats",
    "get_store",
    "init",
    "init_from_settings",
    "is_initialized",
    "render_key",
    "reset",
]
