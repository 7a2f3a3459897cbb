"""Process-wide backing store handle.

The store is installed once at startup with ``init`` and read by every
cached call through ``get_store``. Installing again swaps the handle; calls
already running keep the store they acquired when they began, since they
hold their own reference to it.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import structlog

from mcache_core.exceptions import InitializationError

if TYPE_CHECKING:
    from mcache_core.config.settings import Settings
    from mcache_core.interfaces.store import StoreClient

logger = structlog.get_logger()

# Module-level handle, set by init(); None until then.
_store: StoreClient | None = None
_lock = threading.Lock()


def init(store: StoreClient) -> None:
    """Install (or replace) the shared store handle."""
    global _store

    with _lock:
        previous = _store
        _store = store

    if previous is None:
        logger.info("store_handle_installed", store=type(store).__name__)
    else:
        logger.warning(
            "store_handle_replaced",
            previous=type(previous).__name__,
            store=type(store).__name__,
        )


def init_from_settings(settings: Settings | None = None) -> StoreClient:
    """Build the store described by settings (or the environment) and install it."""
    from mcache_core.config.settings import Settings as _Settings
    from mcache_infra.store.factory import create_store

    store = create_store(settings or _Settings())
    init(store)
    return store


def get_store() -> StoreClient:
    """Return the installed store; raise InitializationError before init()."""
    with _lock:
        store = _store
    if store is None:
        msg = "mcache: store not initialized; call mcache.init() first"
        raise InitializationError(msg)
    return store


def is_initialized() -> bool:
    """Whether a store handle is installed."""
    with _lock:
        return _store is not None


def reset() -> StoreClient | None:
    """Detach the current handle and return it (for shutdown and tests)."""
    global _store

    with _lock:
        previous = _store
        _store = None
    return previous
