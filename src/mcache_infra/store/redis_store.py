"""Redis-backed implementation of StoreClient."""

from __future__ import annotations

from typing import Any

import redis
import structlog
from redis.asyncio import Redis as AsyncRedis

from mcache_core.exceptions import CodecError, StoreError

logger = structlog.get_logger()

_STORE_FAILURES = (redis.RedisError, OSError)


class RedisStore:
    """Shared cache backed by Redis.

    Holds one sync and one asyncio client, normally built from the same URL,
    so sync and async cached functions read and write the same keyspace.
    TTLs are sent as PX (milliseconds).
    """

    def __init__(
        self,
        client: redis.Redis | None = None,  # type: ignore[type-arg]
        async_client: AsyncRedis | None = None,  # type: ignore[type-arg]
    ) -> None:
        """Initialize with redis-py clients; either may be omitted."""
        if client is None and async_client is None:
            msg = "RedisStore needs a sync client, an async client, or both"
            raise ValueError(msg)
        self._redis = client
        self._aredis = async_client

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        max_connections: int = 16,
        connect_timeout: float | None = 10.0,
        socket_timeout: float | None = 5.0,
    ) -> RedisStore:
        """Build both clients, each with its own pool, from one URL."""
        options: dict[str, Any] = {
            "max_connections": max_connections,
            "socket_connect_timeout": connect_timeout,
            "socket_timeout": socket_timeout,
        }
        return cls(
            client=redis.Redis.from_url(url, **options),
            async_client=AsyncRedis.from_url(url, **options),
        )

    # --- sync ---

    def get(self, key: str) -> str | None:
        """Retrieve a value by key."""
        client = self._sync_client("get", key)
        try:
            value = client.get(key)
        except _STORE_FAILURES as exc:
            raise StoreError(f"redis GET failed: {exc}", operation="get", key=key) from exc
        return _decode(value, key)

    def set(self, key: str, value: str, ttl_ms: int) -> None:
        """Store a value with a millisecond TTL."""
        client = self._sync_client("set", key)
        try:
            client.set(name=key, value=value, **_expiry(ttl_ms))
        except _STORE_FAILURES as exc:
            raise StoreError(f"redis SET failed: {exc}", operation="set", key=key) from exc

    def delete(self, key: str) -> bool:
        """Delete a key from the cache."""
        client = self._sync_client("delete", key)
        try:
            count = client.delete(key)
        except _STORE_FAILURES as exc:
            raise StoreError(f"redis DEL failed: {exc}", operation="delete", key=key) from exc
        return bool(count)

    def close(self) -> None:
        """Close the sync connection pool."""
        if self._redis is not None:
            self._redis.close()

    # --- async ---

    async def aget(self, key: str) -> str | None:
        """Retrieve a value by key."""
        client = self._async_client("get", key)
        try:
            value = await client.get(key)
        except _STORE_FAILURES as exc:
            raise StoreError(f"redis GET failed: {exc}", operation="get", key=key) from exc
        return _decode(value, key)

    async def aset(self, key: str, value: str, ttl_ms: int) -> None:
        """Store a value with a millisecond TTL."""
        client = self._async_client("set", key)
        try:
            await client.set(name=key, value=value, **_expiry(ttl_ms))
        except _STORE_FAILURES as exc:
            raise StoreError(f"redis SET failed: {exc}", operation="set", key=key) from exc

    async def adelete(self, key: str) -> bool:
        """Delete a key from the cache."""
        client = self._async_client("delete", key)
        try:
            count = await client.delete(key)
        except _STORE_FAILURES as exc:
            raise StoreError(f"redis DEL failed: {exc}", operation="delete", key=key) from exc
        return bool(count)

    async def aclose(self) -> None:
        """Close the asyncio connection pool."""
        if self._aredis is not None:
            await self._aredis.aclose()

    def _sync_client(self, operation: str, key: str) -> redis.Redis:  # type: ignore[type-arg]
        if self._redis is None:
            msg = "RedisStore has no sync client"
            raise StoreError(msg, operation=operation, key=key)
        return self._redis

    def _async_client(self, operation: str, key: str) -> AsyncRedis:  # type: ignore[type-arg]
        if self._aredis is None:
            msg = "RedisStore has no async client"
            raise StoreError(msg, operation=operation, key=key)
        return self._aredis


def _expiry(ttl_ms: int) -> dict[str, int]:
    """SET keyword arguments for a TTL; Redis rejects PX 0, so 0 means no expiry."""
    if ttl_ms > 0:
        return {"px": ttl_ms}
    logger.debug("cache_ttl_zero", detail="value stored without expiry")
    return {}


def _decode(value: Any, key: str) -> str | None:
    """Normalize a Redis reply to str."""
    if value is None:
        return None
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CodecError(f"stored value for {key!r} is not UTF-8", key=key) from exc
    return str(value)
