"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from mcache.observability import get_stats
from mcache_core import handle
from mcache_infra.store.disk_store import DiskStore
from tests.mocks.mock_settings import make_settings


@pytest.fixture
def mock_settings() -> MagicMock:
    """Return a MagicMock Settings with sensible defaults."""
    return make_settings()


@pytest.fixture
def disk_store(tmp_path: Path) -> Generator[DiskStore, None, None]:
    """A real diskcache store in a temporary directory."""
    store = DiskStore(tmp_path / "cache")
    yield store
    store.close()


@pytest.fixture
def installed_store(disk_store: DiskStore) -> Generator[DiskStore, None, None]:
    """Install disk_store as the shared handle; detach it afterwards."""
    handle.init(disk_store)
    yield disk_store
    handle.reset()


@pytest.fixture(autouse=True)
def _isolate_handle_and_stats() -> Generator[None, None, None]:
    """Every test starts with no store installed and zeroed counters."""
    handle.reset()
    get_stats().reset()
    yield
    handle.reset()
