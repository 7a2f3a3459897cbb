"""The ``cached`` decorator and call-site helpers."""

from __future__ import annotations

import functools
import inspect
import typing
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from mcache.executor import CacheExecutor
from mcache.observability.hooks import CompositeCacheHook, default_hooks
from mcache_core.binding import bind_arguments, resolve_key, validate_roots
from mcache_core.constants import DEFAULT_TTL_MS
from mcache_core.exceptions import CodecError
from mcache_core.handle import get_store
from mcache_core.interfaces.codec import Codec
from mcache_core.interfaces.hooks import CacheHook
from mcache_core.template import KeyTemplate, compile_template
from mcache_infra.codec.json_codec import JsonCodec

F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")


def cached(
    template: str,
    ttl: int = DEFAULT_TTL_MS,
    *,
    codec: Codec | None = None,
    hooks: Sequence[CacheHook] | None = None,
) -> Callable[[F], F]:
    """Decorator adding cache-aside lookups to a sync or async function.

    Args:
        template: Key template with ``{arg}`` / ``{arg.field}`` placeholders.
        ttl: Time to live in milliseconds (>= 0; 0 stores without expiry).
        codec: Result codec; defaults to JSON validated against the return
            annotation.
        hooks: Event hooks; defaults to logging plus process-wide stats.

    Raises TemplateError, BindingError or ValueError when the function is
    decorated, never at call time, for a malformed template, a placeholder
    naming an unknown argument, or a bad TTL. Without an explicit codec, a
    return annotation pydantic cannot serialize raises CodecError at the
    same point.

    Example:
        >>> @cached("user2:{p.id}-{p.token}", ttl=10_000)
        ... async def fetch_user(p: UserParam) -> User | None:
        ...     return await db.load_user(p.id)
    """
    plan = compile_template(template)
    ttl_ms = _check_ttl(ttl)

    def decorator(fn: F) -> F:
        signature = inspect.signature(fn)
        validate_roots(plan, signature)

        fn_codec = codec
        codec_factory = None
        if fn_codec is None:
            try:
                fn_codec = JsonCodec(_return_type(fn))
            except NameError:
                # Annotation names a class defined later; resolve on first call
                codec_factory = functools.partial(_codec_for, fn)

        executor = CacheExecutor(
            name=fn.__qualname__,
            ttl_ms=ttl_ms,
            hook=CompositeCacheHook(hooks if hooks is not None else default_hooks()),
            codec=fn_codec,
            codec_factory=codec_factory,
        )

        def cache_key(*args: Any, **kwargs: Any) -> str:
            return resolve_key(plan, bind_arguments(signature, args, kwargs))

        def invalidate(*args: Any, **kwargs: Any) -> bool:
            return get_store().delete(cache_key(*args, **kwargs))

        async def ainvalidate(*args: Any, **kwargs: Any) -> bool:
            return await get_store().adelete(cache_key(*args, **kwargs))

        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                store = get_store()
                key = cache_key(*args, **kwargs)
                return await executor.execute_async(store, key, lambda: fn(*args, **kwargs))

            wrapper: Any = async_wrapper
        else:

            @functools.wraps(fn)
            def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
                store = get_store()
                key = cache_key(*args, **kwargs)
                return executor.execute(store, key, lambda: fn(*args, **kwargs))

            wrapper = sync_wrapper

        # Cache control attributes
        wrapper.cache_key = cache_key
        wrapper.invalidate = invalidate
        wrapper.ainvalidate = ainvalidate
        wrapper.template = plan
        wrapper.ttl_ms = ttl_ms
        wrapper.executor = executor
        return wrapper  # type: ignore[no-any-return]

    return decorator


def get_or_compute(
    key: str,
    ttl_ms: int,
    compute: Callable[[], T],
    *,
    codec: Codec | None = None,
    hooks: Sequence[CacheHook] | None = None,
) -> T:
    """Cache-aside for an explicit key around a zero-argument callable."""
    store = get_store()
    executor = _adhoc_executor(ttl_ms, codec, hooks)
    return executor.execute(store, key, compute)


async def aget_or_compute(
    key: str,
    ttl_ms: int,
    compute: Callable[[], Awaitable[T]],
    *,
    codec: Codec | None = None,
    hooks: Sequence[CacheHook] | None = None,
) -> T:
    """Async cache-aside for an explicit key around a coroutine factory."""
    store = get_store()
    executor = _adhoc_executor(ttl_ms, codec, hooks)
    return await executor.execute_async(store, key, compute)


def render_key(template: str | KeyTemplate, **arguments: Any) -> str:
    """Render a template against keyword arguments, without touching the store."""
    plan = template if isinstance(template, KeyTemplate) else compile_template(template)
    return resolve_key(plan, arguments)


def _adhoc_executor(
    ttl_ms: int,
    codec: Codec | None,
    hooks: Sequence[CacheHook] | None,
) -> CacheExecutor:
    return CacheExecutor(
        name="get_or_compute",
        ttl_ms=_check_ttl(ttl_ms),
        hook=CompositeCacheHook(hooks if hooks is not None else default_hooks()),
        codec=codec if codec is not None else JsonCodec(),
    )


def _return_type(fn: Callable[..., Any]) -> Any:
    """fn's resolved return annotation, Any when it has none."""
    return typing.get_type_hints(fn).get("return", Any)


def _codec_for(fn: Callable[..., Any]) -> Codec:
    """JSON codec validating against fn's return annotation."""
    try:
        return_type = _return_type(fn)
    except NameError as exc:
        msg = f"cannot resolve return annotation of {fn.__qualname__}: {exc}"
        raise CodecError(msg) from exc
    return JsonCodec(return_type)


def _check_ttl(ttl: Any) -> int:
    if isinstance(ttl, bool) or not isinstance(ttl, int):
        msg = f"ttl must be an integer number of milliseconds, got {ttl!r}"
        raise ValueError(msg)
    if ttl < 0:
        msg = f"ttl must be >= 0, got {ttl}"
        raise ValueError(msg)
    return ttl
