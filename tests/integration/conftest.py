"""Integration test fixtures: a real Redis on localhost, test DB 1."""

from __future__ import annotations

import logging
import socket
import time
from collections.abc import Generator

import pytest
import redis

from mcache.observability import get_stats
from mcache_core import handle
from mcache_infra.store.redis_store import RedisStore

TEST_REDIS_URL = "redis://localhost:6379/1"

# ---------------------------------------------------------------------------
# Service health checks (with retry for CI container start-up)
# ---------------------------------------------------------------------------


def _tcp_reachable(
    host: str,
    port: int,
    timeout: float = 1.0,
    retries: int = 15,
    delay: float = 2.0,
) -> bool:
    """Check if a TCP service is reachable, retrying on failure."""
    for attempt in range(retries):
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            if attempt < retries - 1:
                time.sleep(delay)
    return False


_redis_up = _tcp_reachable("localhost", 6379, retries=3, delay=1.0)

require_redis = pytest.mark.skipif(
    not _redis_up,
    reason="Redis not reachable on localhost:6379",
)


# ---------------------------------------------------------------------------
# Redis fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def redis_store() -> Generator[RedisStore, None, None]:
    """RedisStore on test DB 1, flushed before and after each test."""
    if not _redis_up:
        pytest.skip("Redis not available")

    admin = redis.Redis.from_url(TEST_REDIS_URL)
    admin.flushdb()
    store = RedisStore.from_url(TEST_REDIS_URL, max_connections=4)
    yield store
    store.close()
    admin.flushdb()
    admin.close()


@pytest.fixture
def installed_redis(redis_store: RedisStore) -> Generator[RedisStore, None, None]:
    """Install redis_store as the shared handle for decorator tests."""
    handle.init(redis_store)
    get_stats().reset()
    yield redis_store
    handle.reset()


# ---------------------------------------------------------------------------
# Logging cleanup
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Save and restore root logger handlers.

    Tests that call configure_logging() replace root logger handlers.
    Without cleanup, stale StreamHandlers write to pytest-captured streams
    that are already closed during teardown.
    """
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.level = original_level
