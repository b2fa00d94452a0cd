"""Connection management for SQLite-backed stores."""

import json
import sqlite3
import threading
import uuid
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any, NoReturn

import aiosqlite

from keeplog.core.exceptions import StoreClosedError

MEMORY_DATABASE = ":memory:"


def _resolve_database(db_path: str) -> tuple[str, bool]:
    """Return (database, uri) for sqlite3.connect / aiosqlite.connect.

    A ":memory:" path becomes a uniquely named shared-cache in-memory
    database so that sync and async connections see the same data.
    """
    if db_path == MEMORY_DATABASE:
        return f"file:keeplog-{uuid.uuid4().hex}?mode=memory&cache=shared", True
    return db_path, False


def _safe_json_loads(
    data: str, default: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Parse a JSON object, returning default if the text is not valid JSON.

    Args:
        data: JSON string to parse.
        default: Value to return if parsing fails. Defaults to empty dict.
    """
    if default is None:
        default = {}
    try:
        result = json.loads(data)
    except json.JSONDecodeError:
        return default
    if not isinstance(result, dict):
        return default
    return result


class SyncConnectionManager:
    """Manages sync (sqlite3) database connections.

    Initializes the schema once, under a lock. For file databases a new
    connection is opened per use and closed afterwards. For :memory:
    databases a single connection is kept open for the lifetime of the
    manager (the database lives only as long as one connection does) and
    access to it is serialized with a lock.

    Once closed, the manager never reopens: every later connection()
    raises StoreClosedError.
    """

    def __init__(self, db_path: str, schema: str) -> None:
        self._db_path = db_path
        self._schema = schema
        self._database, self._uri = _resolve_database(db_path)
        self._initialized = False
        self._closed = False
        self._lock = threading.Lock()
        self._memory_lock = threading.RLock()
        self._persistent_conn: sqlite3.Connection | None = None

    @property
    def is_memory(self) -> bool:
        """Return True for :memory: databases."""
        return self._db_path == MEMORY_DATABASE

    @property
    def database(self) -> str:
        """Database name as passed to connect()."""
        return self._database

    @property
    def uri(self) -> bool:
        """Whether the database name is a URI."""
        return self._uri

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed

    def _raise_closed(self) -> NoReturn:
        raise StoreClosedError(f"Log store {self._db_path} is closed")

    def check_open(self) -> None:
        """Raise StoreClosedError if close() has been called."""
        if self._closed:
            self._raise_closed()

    def ensure_initialized(self) -> None:
        """Initialize database schema synchronously.

        Raises:
            StoreClosedError: If the manager has been closed.
        """
        if self._initialized:
            return
        with self._lock:
            if self._closed:
                self._raise_closed()
            if self._initialized:
                return
            if self.is_memory:
                self._persistent_conn = sqlite3.connect(
                    self._database, uri=True, check_same_thread=False
                )
                self._persistent_conn.executescript(self._schema)
            else:
                db = sqlite3.connect(self._database)
                try:
                    db.execute("PRAGMA journal_mode=WAL")
                    db.executescript(self._schema)
                finally:
                    db.close()
            self._initialized = True

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for sync database connections.

        Closes file-database connections after use. The :memory:
        connection stays open and is held exclusively while in use.
        """
        self.ensure_initialized()
        if self.is_memory:
            with self._memory_lock:
                if self._persistent_conn is None:
                    self._raise_closed()
                yield self._persistent_conn
            return
        self.check_open()
        conn = sqlite3.connect(self._database)
        try:
            yield conn
        finally:
            conn.close()

    def close(self) -> None:
        """Close the manager. A :memory: database is discarded."""
        with self._lock:
            self._closed = True
            if self._persistent_conn is not None:
                with self._memory_lock:
                    self._persistent_conn.close()
                    self._persistent_conn = None


class AsyncConnectionManager:
    """Manages async (aiosqlite) database connections.

    Schema initialization is delegated to the sync manager, which also
    keeps :memory: databases alive, so every async connection is opened
    per use and closed afterwards.
    """

    def __init__(self, sync_manager: SyncConnectionManager) -> None:
        self._sync_manager = sync_manager

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Context manager for async database connections."""
        self._sync_manager.ensure_initialized()
        self._sync_manager.check_open()
        db = await aiosqlite.connect(
            self._sync_manager.database, uri=self._sync_manager.uri
        )
        try:
            yield db
        finally:
            await db.close()


class SQLiteStorageBase:
    """Base class for SQLite stores.

    Delegates connection lifecycle to SyncConnectionManager and
    AsyncConnectionManager. Subclasses provide the schema and implement
    domain-specific reads and writes.
    """

    def __init__(self, db_path: str, schema: str) -> None:
        self._db_path = db_path
        self._sync_manager = SyncConnectionManager(db_path, schema)
        self._async_manager = AsyncConnectionManager(self._sync_manager)

    @property
    def db_path(self) -> str:
        """Path the store was opened with."""
        return self._db_path

    @contextmanager
    def sync_connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for sync database connections."""
        with self._sync_manager.connection() as conn:
            yield conn

    @asynccontextmanager
    async def async_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Context manager for async database connections."""
        async with self._async_manager.connection() as conn:
            yield conn
