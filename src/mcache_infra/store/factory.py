"""Store construction from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from mcache_infra.store.disk_store import DiskStore
from mcache_infra.store.redis_store import RedisStore

if TYPE_CHECKING:
    from mcache_core.config.settings import Settings
    from mcache_core.interfaces.store import StoreClient

logger = structlog.get_logger()


def create_store(settings: Settings) -> StoreClient:
    """Create the backing store selected by settings.store_backend."""
    if settings.store_backend == "disk":
        logger.info("store_created", backend="disk", cache_dir=str(settings.cache_dir))
        return DiskStore(settings.cache_dir)

    logger.info("store_created", backend="redis", uri=_redact(settings.redis_uri))
    return RedisStore.from_url(
        settings.redis_uri,
        max_connections=settings.redis_pool_size,
        connect_timeout=settings.redis_connect_timeout_seconds,
        socket_timeout=settings.redis_socket_timeout_seconds,
    )


def _redact(uri: str) -> str:
    """Hide the password in a redis:// URL for logging."""
    scheme, sep, rest = uri.partition("://")
    if not sep or "@" not in rest:
        return uri
    _, _, host = rest.rpartition("@")
    return f"{scheme}://***@{host}"
