"""Log store adapters implementing LoggerStorePort."""

from keeplog.adapters.storage.in_memory import InMemoryLoggerStore
from keeplog.adapters.storage.shared import reset_shared_store, shared_store
from keeplog.adapters.storage.sqlite_store import SQLiteLoggerStore

__all__ = [
    "InMemoryLoggerStore",
    "SQLiteLoggerStore",
    "reset_shared_store",
    "shared_store",
]
