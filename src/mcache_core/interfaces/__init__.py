"""Abstract interfaces for mcache collaborators."""

from mcache_core.interfaces.codec import Codec
from mcache_core.interfaces.hooks import CacheHook
from mcache_core.interfaces.store import StoreClient

__all__ = [
    "CacheHook",
    "Codec",
    "StoreClient",
]
