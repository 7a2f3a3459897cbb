"""Cache event hook interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheHook(Protocol):
    """Observer notified of cache events on every wrapped call.

    Hooks are the side channel for store failures: a failed read or write
    never fails the call, it is reported here instead.
    """

    def on_hit(self, name: str, key: str) -> None:
        """A stored value was found and returned."""
        ...

    def on_miss(self, name: str, key: str) -> None:
        """No usable stored value; the function will run."""
        ...

    def on_store(self, name: str, key: str, ttl_ms: int) -> None:
        """A computed result was written back."""
        ...

    def on_error(self, name: str, key: str, stage: str, error: Exception) -> None:
        """A read, encode or write failed; stage names which."""
        ...
