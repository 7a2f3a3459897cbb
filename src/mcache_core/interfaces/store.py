"""Abstract backing store interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StoreClient(Protocol):
    """Key-value store used by cached functions.

    One object serves both calling conventions so a single handle can be
    shared by sync and async wrappers. Every failure is raised as StoreError.
    """

    def get(self, key: str) -> str | None:
        """Retrieve a value by key, or None if not found."""
        ...

    def set(self, key: str, value: str, ttl_ms: int) -> None:
        """Store a value that expires after ttl_ms milliseconds."""
        ...

    def delete(self, key: str) -> bool:
        """Delete a key; return True if it existed."""
        ...

    async def aget(self, key: str) -> str | None:
        """Async counterpart of get."""
        ...

    async def aset(self, key: str, value: str, ttl_ms: int) -> None:
        """Async counterpart of set."""
        ...

    async def adelete(self, key: str) -> bool:
        """Async counterpart of delete."""
        ...

    def close(self) -> None:
        """Release sync resources."""
        ...

    async def aclose(self) -> None:
        """Release async resources."""
        ...
