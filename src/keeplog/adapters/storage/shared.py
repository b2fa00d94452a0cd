"""Process-wide shared log store.

The shared store is the default target of handlers constructed without an
explicit store. It is created on first use, at the path returned by
shared_store_path(), and lives until the process exits or
reset_shared_store() is called.
"""

import logging
import threading

from keeplog.adapters.storage.sqlite_store import SQLiteLoggerStore
from keeplog.core.config import StoreConfiguration, shared_store_path

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_shared: SQLiteLoggerStore | None = None


def shared_store(configuration: StoreConfiguration | None = None) -> SQLiteLoggerStore:
    """Return the shared store, creating it on first use.

    Args:
        configuration: Used only when this call creates the store.
    """
    global _shared
    if _shared is not None:
        return _shared
    with _lock:
        if _shared is None:
            path = shared_store_path()
            path.parent.mkdir(parents=True, exist_ok=True)
            _shared = SQLiteLoggerStore(str(path), configuration)
            logger.debug("Created shared log store at %s", path)
        return _shared


def reset_shared_store() -> None:
    """Close and forget the shared store; the next use creates a new one."""
    global _shared
    with _lock:
        if _shared is not None:
            _shared.close()
            _shared = None
