"""Tests for observability/tracing.py."""

from __future__ import annotations

from collections.abc import Generator
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from mcache import cached
from mcache.observability import tracing
from mcache.observability.tracing import (
    cache_span,
    configure_tracing,
    disable_tracing,
    get_tracer,
    use_tracer,
)
from mcache_infra.store.disk_store import DiskStore


def _make_settings(**overrides: object) -> SimpleNamespace:
    """Create a minimal settings object."""
    defaults: dict[str, object] = {
        "otel_exporter": "none",
        "otel_endpoint": "http://localhost:4317",
        "otel_service_name": "test-service",
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _make_tracer() -> tuple[MagicMock, MagicMock]:
    """A tracer whose start_as_current_span yields a recording mock span."""
    span = MagicMock()
    span.__enter__ = MagicMock(return_value=span)
    span.__exit__ = MagicMock(return_value=False)
    tracer = MagicMock()
    tracer.start_as_current_span.return_value = span
    return tracer, span


@pytest.fixture(autouse=True)
def _no_tracer() -> Generator[None, None, None]:
    """Leave tracing disabled for the next test."""
    yield
    disable_tracing()


@pytest.mark.unit
class TestConfigureTracing:
    """Tests for configure_tracing."""

    def test_configure_tracing_none(self) -> None:
        """'none' exporter leaves tracing off."""
        configure_tracing(_make_settings(otel_exporter="none"))  # type: ignore[arg-type]
        assert get_tracer() is None

    def test_configure_tracing_console(self) -> None:
        """'console' exporter creates a tracer."""
        pytest.importorskip("opentelemetry.sdk")
        configure_tracing(_make_settings(otel_exporter="console"))  # type: ignore[arg-type]
        assert tracing._tracer is not None


@pytest.mark.unit
class TestCacheSpan:
    """Tests for cache_span."""

    def test_noop_when_disabled(self) -> None:
        """Yields None without a tracer."""
        with cache_span("fetch", 100) as span:
            assert span is None

    def test_span_attributes(self) -> None:
        """The span is named after the function and carries the TTL."""
        tracer, span = _make_tracer()
        use_tracer(tracer)

        with cache_span("fetch", 100) as active:
            assert active is span

        tracer.start_as_current_span.assert_called_once_with("cache.fetch")
        span.set_attribute.assert_any_call("cache.function", "fetch")
        span.set_attribute.assert_any_call("cache.ttl_ms", 100)


@pytest.mark.unit
class TestCachedCallSpans:
    """Spans produced by decorated functions."""

    def test_miss_then_hit(self, installed_store: DiskStore) -> None:
        """Each call gets a span marked with its key and outcome."""
        tracer, span = _make_tracer()
        use_tracer(tracer)

        @cached("item:{id}", ttl=5_000)
        def fetch(id: int) -> int:
            return id

        fetch(1)
        span.set_attribute.assert_any_call("cache.key", "item:1")
        span.set_attribute.assert_any_call("cache.hit", False)

        span.set_attribute.reset_mock()
        fetch(1)
        span.set_attribute.assert_any_call("cache.hit", True)
        assert tracer.start_as_current_span.call_count == 2

    @pytest.mark.asyncio
    async def test_async_call_is_traced(self, installed_store: DiskStore) -> None:
        """Async wrappers open the same span."""
        tracer, span = _make_tracer()
        use_tracer(tracer)

        @cached("item:{id}", ttl=5_000)
        async def fetch(id: int) -> int:
            return id

        await fetch(2)
        name = tracer.start_as_current_span.call_args.args[0]
        assert name.startswith("cache.") and name.endswith("fetch")
        span.set_attribute.assert_any_call("cache.key", "item:2")
