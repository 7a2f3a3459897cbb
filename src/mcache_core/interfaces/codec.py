"""Abstract serialization codec interface."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Codec(Protocol):
    """Bijection between a result value and its stored string form."""

    def encode(self, value: Any) -> str:
        """Serialize a value; raise CodecError on failure."""
        ...

    def decode(self, raw: str) -> Any:
        """Deserialize a stored string; raise CodecError on failure."""
        ...
