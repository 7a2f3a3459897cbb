"""Application settings using pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcache_core.constants import ENV_PREFIX


class Settings(BaseSettings):
    """Central configuration for mcache."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_file=".env")

    # --- Store ---
    store_backend: Literal["redis", "disk"] = Field(
        default="redis",
        description="Backing store: 'redis' for shared caches, 'disk' for single-node use",
    )
    redis_uri: str = Field(
        default="redis://127.0.0.1:6379/0",
        description="Redis connection URL",
    )
    redis_pool_size: int = Field(
        default=16,
        description="Maximum connections per Redis pool",
    )
    redis_connect_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for establishing a Redis connection",
    )
    redis_socket_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for a single Redis command",
    )
    cache_dir: Path = Field(
        default=Path("./.cache/mcache"),
        description="Directory for the diskcache store",
    )

    # --- Observability ---
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer",
    )
    otel_exporter: Literal["none", "console", "otlp"] = Field(
        default="none",
        description="OpenTelemetry span exporter",
    )
    otel_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP collector endpoint",
    )
    otel_service_name: str = Field(
        default="mcache",
        description="service.name resource attribute",
    )

    @model_validator(mode="after")
    def validate_pool(self) -> Settings:
        """Reject empty pools."""
        if self.redis_pool_size < 1:
            msg = "redis_pool_size must be >= 1"
            raise ValueError(msg)
        return self
