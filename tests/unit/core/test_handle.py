"""Tests for the shared store handle."""

from __future__ import annotations

import threading
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from mcache_core import handle
from mcache_core.exceptions import InitializationError
from mcache_infra.store.disk_store import DiskStore
from tests.mocks.mock_settings import make_settings


@pytest.mark.unit
class TestHandle:
    """Test install, read, replace and reset of the process-wide store."""

    def test_get_store_before_init_raises(self) -> None:
        """Using the handle before init() is an InitializationError."""
        with pytest.raises(InitializationError, match="call mcache.init\\(\\) first"):
            handle.get_store()

    def test_init_then_get(self) -> None:
        """init() installs the store get_store() returns."""
        store = MagicMock()
        handle.init(store)
        assert handle.get_store() is store
        assert handle.is_initialized() is True

    def test_init_replaces_store(self) -> None:
        """A second init() swaps the handle."""
        first, second = MagicMock(), MagicMock()
        handle.init(first)
        held = handle.get_store()
        handle.init(second)
        assert handle.get_store() is second
        # A caller that acquired the old store keeps it
        assert held is first

    def test_reset_detaches(self) -> None:
        """reset() returns the old store and leaves the handle empty."""
        store = MagicMock()
        handle.init(store)
        assert handle.reset() is store
        assert handle.is_initialized() is False
        assert handle.reset() is None

    def test_concurrent_readers_see_installed_store(self) -> None:
        """Many threads read the same handle."""
        store = MagicMock()
        handle.init(store)
        seen: list[object] = []

        def _read() -> None:
            seen.append(handle.get_store())

        threads = [threading.Thread(target=_read) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert seen == [store] * 16

    def test_init_from_settings_builds_disk_store(self, tmp_path: Path) -> None:
        """init_from_settings creates and installs the configured store."""
        settings = make_settings(store_backend="disk", cache_dir=tmp_path / "c")
        store = handle.init_from_settings(settings)  # type: ignore[arg-type]
        try:
            assert isinstance(store, DiskStore)
            assert handle.get_store() is store
        finally:
            store.close()

    def test_init_from_settings_reads_environment(self) -> None:
        """Without explicit settings, Settings() is loaded from the environment."""
        fake_store = MagicMock()
        with (
            patch("mcache_core.config.settings.Settings") as mock_settings_cls,
            patch("mcache_infra.store.factory.create_store", return_value=fake_store) as factory,
        ):
            result = handle.init_from_settings()
        factory.assert_called_once_with(mock_settings_cls.return_value)
        assert result is fake_store
        assert handle.get_store() is fake_store
