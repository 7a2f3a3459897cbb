"""JSON codec built on pydantic TypeAdapter."""

from __future__ import annotations

from typing import Any

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from mcache_core.exceptions import CodecError


class JsonCodec:
    """Serialize results to JSON and validate them back into a declared type.

    The target type is normally the cached function's return annotation, so a
    stored ``User`` comes back as a ``User`` rather than a dict.
    """

    def __init__(self, return_type: Any = Any) -> None:
        """Initialize for a given result type (Any accepts plain JSON)."""
        self.return_type = return_type
        try:
            self._adapter: TypeAdapter[Any] = TypeAdapter(return_type)
        except PydanticSchemaGenerationError as exc:
            msg = f"no JSON schema for {self._type_name()}; pass an explicit codec"
            raise CodecError(msg) from exc

    def encode(self, value: Any) -> str:
        """Serialize a value to a JSON string.

        A value that does not match the declared type is rejected rather than
        written, since it could never be decoded back.
        """
        try:
            return self._adapter.dump_json(value, warnings="error").decode("utf-8")
        except (PydanticSerializationError, ValueError, TypeError) as exc:
            msg = f"cannot serialize {type(value).__name__} as {self._type_name()}: {exc}"
            raise CodecError(msg) from exc

    def decode(self, raw: str) -> Any:
        """Parse a JSON string into the declared type."""
        try:
            return self._adapter.validate_json(raw)
        except ValidationError as exc:
            msg = f"stored value is not a valid {self._type_name()}: {exc}"
            raise CodecError(msg) from exc

    def _type_name(self) -> str:
        return getattr(self.return_type, "__name__", repr(self.return_type))

    def __repr__(self) -> str:
        return f"JsonCodec({self._type_name()})"
