"""diskcache-backed implementation of StoreClient."""

from __future__ import annotations

import asyncio
import sqlite3
from pathlib import Path

import diskcache

from mcache_core.exceptions import StoreError

_STORE_FAILURES = (diskcache.Timeout, sqlite3.Error, OSError)


class DiskStore:
    """Single-node persistent cache backed by diskcache (SQLite under the hood).

    Shared between processes on one host through the cache directory.
    """

    def __init__(self, cache_dir: Path) -> None:
        """Initialize with a cache directory."""
        cache_dir.mkdir(parents=True, exist_ok=True)
        self._cache = diskcache.Cache(str(cache_dir))

    def get(self, key: str) -> str | None:
        """Retrieve a value by key."""
        try:
            result = self._cache.get(key)
        except _STORE_FAILURES as exc:
            raise StoreError(f"diskcache get failed: {exc}", operation="get", key=key) from exc
        if result is None:
            return None
        return str(result)

    def set(self, key: str, value: str, ttl_ms: int) -> None:
        """Store a value with a millisecond TTL (0 stores without expiry)."""
        expire = ttl_ms / 1000 if ttl_ms > 0 else None
        try:
            self._cache.set(key, value, expire=expire)
        except _STORE_FAILURES as exc:
            raise StoreError(f"diskcache set failed: {exc}", operation="set", key=key) from exc

    def delete(self, key: str) -> bool:
        """Delete a key from the cache."""
        try:
            return bool(self._cache.delete(key))
        except _STORE_FAILURES as exc:
            raise StoreError(
                f"diskcache delete failed: {exc}", operation="delete", key=key
            ) from exc

    def close(self) -> None:
        """Close the cache."""
        self._cache.close()

    async def aget(self, key: str) -> str | None:
        """Retrieve a value by key."""
        return await asyncio.to_thread(self.get, key)

    async def aset(self, key: str, value: str, ttl_ms: int) -> None:
        """Store a value with a millisecond TTL."""
        await asyncio.to_thread(self.set, key, value, ttl_ms)

    async def adelete(self, key: str) -> bool:
        """Delete a key from the cache."""
        return await asyncio.to_thread(self.delete, key)

    async def aclose(self) -> None:
        """Close the cache."""
        self.close()
