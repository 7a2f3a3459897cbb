"""Cache-aside executor.

The protocol for one cached call is written once, as a generator that
yields the I/O it needs (``Read``, ``Compute``, ``Write``) and receives the
outcome. ``run_sync`` and ``run_async`` drive that generator: the first
performs each step by blocking, the second by awaiting. Store failures are
thrown back into the generator as ``StoreError`` so every degradation
decision lives in ``cache_aside``.

Per call: read the key; on a hit decode and return; on a miss (or a failed
read) run the function, encode the result, write it with the TTL, and
return it. A failed encode or write is reported to the hooks and the
computed result is still returned, as is the result of a call whose codec
could not be built, which runs without touching the store. A stored value
that fails to decode fails the call with CodecError.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Generator
from dataclasses import dataclass
from typing import Any, TypeVar

from mcache.observability.tracing import cache_span
from mcache_core.exceptions import CodecError, StoreError
from mcache_core.interfaces.codec import Codec
from mcache_core.interfaces.hooks import CacheHook
from mcache_core.interfaces.store import StoreClient

T = TypeVar("T")


@dataclass(frozen=True)
class Read:
    """Fetch the raw stored value for key."""

    key: str


@dataclass(frozen=True)
class Compute:
    """Run the wrapped function."""


@dataclass(frozen=True)
class Write:
    """Store payload under key for ttl_ms."""

    key: str
    payload: str
    ttl_ms: int


Step = Read | Compute | Write

COMPUTE = Compute()


@dataclass
class CallContext:
    """Everything one cached call needs besides the store and the function."""

    name: str
    key: str
    ttl_ms: int
    codec: Codec
    hook: CacheHook
    span: Any = None


def cache_aside(ctx: CallContext) -> Generator[Step, Any, Any]:
    """The cache-aside protocol for one call; returns the call's result."""
    try:
        raw = yield Read(ctx.key)
    except StoreError as exc:
        ctx.hook.on_error(ctx.name, ctx.key, "read", exc)
        raw = None

    if raw is not None:
        try:
            value = ctx.codec.decode(raw)
        except CodecError as exc:
            ctx.hook.on_error(ctx.name, ctx.key, "decode", exc)
            msg = f"cached value for key {ctx.key!r} could not be decoded: {exc}"
            raise CodecError(msg, key=ctx.key) from exc
        ctx.hook.on_hit(ctx.name, ctx.key)
        _mark_span(ctx, hit=True)
        return value

    ctx.hook.on_miss(ctx.name, ctx.key)
    _mark_span(ctx, hit=False)

    result = yield COMPUTE

    try:
        payload = ctx.codec.encode(result)
    except CodecError as exc:
        ctx.hook.on_error(ctx.name, ctx.key, "encode", exc)
        return result

    try:
        yield Write(ctx.key, payload, ctx.ttl_ms)
    except StoreError as exc:
        ctx.hook.on_error(ctx.name, ctx.key, "write", exc)
        return result

    ctx.hook.on_store(ctx.name, ctx.key, ctx.ttl_ms)
    return result


def run_sync(
    steps: Generator[Step, Any, T],
    store: StoreClient,
    compute: Callable[[], Any],
) -> T:
    """Drive the protocol with blocking store calls."""
    reply: Any = None
    failure: StoreError | None = None
    try:
        while True:
            try:
                step = steps.send(reply) if failure is None else steps.throw(failure)
            except StopIteration as stop:
                return stop.value  # type: ignore[no-any-return]
            reply, failure = None, None

            if isinstance(step, Compute):
                reply = compute()
                continue
            try:
                if isinstance(step, Read):
                    reply = store.get(step.key)
                else:
                    store.set(step.key, step.payload, step.ttl_ms)
            except StoreError as exc:
                failure = exc
    finally:
        steps.close()


async def run_async(
    steps: Generator[Step, Any, T],
    store: StoreClient,
    compute: Callable[[], Awaitable[Any]],
) -> T:
    """Drive the protocol, awaiting store I/O and the wrapped coroutine."""
    reply: Any = None
    failure: StoreError | None = None
    try:
        while True:
            try:
                step = steps.send(reply) if failure is None else steps.throw(failure)
            except StopIteration as stop:
                return stop.value  # type: ignore[no-any-return]
            reply, failure = None, None

            if isinstance(step, Compute):
                reply = await compute()
                continue
            try:
                if isinstance(step, Read):
                    reply = await store.aget(step.key)
                else:
                    await store.aset(step.key, step.payload, step.ttl_ms)
            except StoreError as exc:
                failure = exc
    finally:
        steps.close()


class CacheExecutor:
    """Runs calls through the cache-aside protocol for one cached function.

    The codec is given either directly or as a factory; a factory is resolved
    on first use so return annotations that name later-defined classes work.
    """

    def __init__(
        self,
        name: str,
        ttl_ms: int,
        hook: CacheHook,
        *,
        codec: Codec | None = None,
        codec_factory: Callable[[], Codec] | None = None,
    ) -> None:
        if (codec is None) == (codec_factory is None):
            msg = "pass exactly one of codec or codec_factory"
            raise ValueError(msg)
        self.name = name
        self.ttl_ms = ttl_ms
        self.hook = hook
        self._codec = codec
        self._codec_factory = codec_factory

    @property
    def codec(self) -> Codec:
        """The codec, built on first access when given as a factory."""
        if self._codec is None:
            assert self._codec_factory is not None
            self._codec = self._codec_factory()
        return self._codec

    def execute(self, store: StoreClient, key: str, compute: Callable[[], T]) -> T:
        """Run a sync call; compute is invoked only on a miss."""
        with cache_span(self.name, self.ttl_ms) as span:
            codec = self._resolve_codec(key)
            if codec is None:
                return compute()
            steps = cache_aside(self._context(key, codec, span))
            return run_sync(steps, store, compute)

    async def execute_async(
        self,
        store: StoreClient,
        key: str,
        compute: Callable[[], Awaitable[T]],
    ) -> T:
        """Run an async call; compute is awaited only on a miss."""
        with cache_span(self.name, self.ttl_ms) as span:
            codec = self._resolve_codec(key)
            if codec is None:
                return await compute()
            steps = cache_aside(self._context(key, codec, span))
            return await run_async(steps, store, compute)

    def _resolve_codec(self, key: str) -> Codec | None:
        """The codec, or None after reporting why it could not be built.

        Without a codec the call bypasses the store entirely.
        """
        try:
            return self.codec
        except CodecError as exc:
            self.hook.on_error(self.name, key, "encode", exc)
            return None

    def _context(self, key: str, codec: Codec, span: Any) -> CallContext:
        if span is not None:
            span.set_attribute("cache.key", key)
        return CallContext(
            name=self.name,
            key=key,
            ttl_ms=self.ttl_ms,
            codec=codec,
            hook=self.hook,
            span=span,
        )


def _mark_span(ctx: CallContext, *, hit: bool) -> None:
    if ctx.span is not None:
        ctx.span.set_attribute("cache.hit", hit)
