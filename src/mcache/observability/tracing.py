"""OpenTelemetry tracing for cached calls."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from mcache_core.config.settings import Settings

logger = structlog.get_logger()

# Module-level tracer: set by configure_tracing(), None while disabled.
_tracer: Any = None


def configure_tracing(settings: Settings) -> None:
    """Configure OpenTelemetry tracing based on settings.

    All OTEL imports are deferred so the default (no tracing) never loads them.
    """
    global _tracer

    if settings.otel_exporter == "none":
        _tracer = None
        return

    # Deferred imports, only loaded when tracing is enabled
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider

    resource = Resource.create({"service.name": settings.otel_service_name})
    provider = TracerProvider(resource=resource)

    if settings.otel_exporter == "console":
        from opentelemetry.sdk.trace.export import (
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )

        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    elif settings.otel_exporter == "otlp":
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        exporter = OTLPSpanExporter(endpoint=settings.otel_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer("mcache")
    logger.info("tracing_configured", exporter=settings.otel_exporter)


def use_tracer(tracer: Any) -> None:
    """Install an already-built tracer (tests, or apps with their own provider)."""
    global _tracer
    _tracer = tracer


def disable_tracing() -> None:
    """Turn span creation off."""
    global _tracer
    _tracer = None


def get_tracer() -> Any:
    """Return the active tracer, or None when tracing is disabled."""
    return _tracer


@contextmanager
def cache_span(name: str, ttl_ms: int) -> Generator[Any, None, None]:
    """Span around one cached call; yields None when tracing is disabled.

    Usable from both sync and async wrappers since it never awaits.
    """
    if _tracer is None:
        yield None
        return

    with _tracer.start_as_current_span(f"cache.{name}") as span:
        span.set_attribute("cache.function", name)
        span.set_attribute("cache.ttl_ms", ttl_ms)
        yield span
