"""Tests for the pydantic-backed JSON codec."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest
from pydantic import BaseModel

from mcache_core.exceptions import CodecError
from mcache_core.interfaces.codec import Codec
from mcache_infra.codec.json_codec import JsonCodec


class User(BaseModel):
    id: int
    name: str


@dataclass
class Point:
    x: int
    y: int


class Opaque:
    """Not JSON-serializable."""


@pytest.mark.unit
class TestJsonCodec:
    """Serialization round trips and failure modes."""

    @pytest.mark.parametrize(
        ("return_type", "value"),
        [
            (User, User(id=1, name="async_user1")),
            (User | None, None),
            (User | None, User(id=2, name="b")),
            (Point, Point(x=1, y=2)),
            (list[User], [User(id=1, name="a"), User(id=2, name="b")]),
            (dict[str, int], {"a": 1, "b": 2}),
            (tuple[int, str], (1, "x")),
            (str, "plain text"),
            (Any, {"id": 1, "calls_so_far": 1}),
            (Any, [1, "two", None, 3.5, True]),
        ],
    )
    def test_round_trip(self, return_type: Any, value: Any) -> None:
        """decode(encode(x)) == x for supported shapes."""
        codec = JsonCodec(return_type)
        assert codec.decode(codec.encode(value)) == value

    def test_decode_validates_into_declared_type(self) -> None:
        """Stored JSON comes back as the declared model, not a dict."""
        decoded = JsonCodec(User).decode('{"id": 1, "name": "a"}')
        assert isinstance(decoded, User)

    def test_satisfies_codec_protocol(self) -> None:
        """JsonCodec is a Codec."""
        assert isinstance(JsonCodec(), Codec)

    def test_decode_garbage_raises(self) -> None:
        """Invalid JSON is a CodecError."""
        with pytest.raises(CodecError, match="not a valid"):
            JsonCodec(User).decode("{not json")

    def test_decode_wrong_shape_raises(self) -> None:
        """JSON that does not fit the declared type is a CodecError."""
        with pytest.raises(CodecError):
            JsonCodec(User).decode('{"id": "not-a-number"}')

    def test_encode_unserializable_raises(self) -> None:
        """Values with no JSON form are a CodecError."""
        with pytest.raises(CodecError, match="cannot serialize"):
            JsonCodec().encode(Opaque())

    def test_unsupported_type_rejected_at_construction(self) -> None:
        """Types pydantic cannot describe are rejected up front."""
        with pytest.raises(CodecError, match="pass an explicit codec"):
            JsonCodec(Opaque)

    @pytest.mark.parametrize(
        ("return_type", "value"),
        [
            (int, "abc"),
            (User, {"id": 1, "name": "a"}),
            (list[int], ["x"]),
        ],
    )
    def test_encode_type_mismatch_raises(self, return_type: Any, value: Any) -> None:
        """A value that does not match the declared type is never serialized."""
        with pytest.raises(CodecError, match="cannot serialize"):
            JsonCodec(return_type).encode(value)
