"""SQLite log store."""

import json
import logging
import sqlite3
import uuid
from collections.abc import AsyncIterator, Mapping
from types import TracebackType
from typing import Any

import aiosqlite

from keeplog.adapters.storage.sqlite_base import SQLiteStorageBase, _safe_json_loads
from keeplog.core.config import StoreConfiguration
from keeplog.core.exceptions import StoreClosedError
from keeplog.core.levels import StoreLevel
from keeplog.core.models import (
    LoggerMessage,
    LoggerSession,
    StoreMetadataValue,
    metadata_text,
    source_filename,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    started_at REAL NOT NULL,
    version TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at REAL NOT NULL,
    label TEXT NOT NULL,
    level INTEGER NOT NULL,
    session TEXT NOT NULL,
    text TEXT NOT NULL,
    file TEXT NOT NULL DEFAULT '',
    function TEXT NOT NULL DEFAULT '',
    line INTEGER NOT NULL DEFAULT 0,
    metadata TEXT NOT NULL DEFAULT '{}'
);
CREATE INDEX IF NOT EXISTS idx_messages_created_at ON messages(created_at);
CREATE INDEX IF NOT EXISTS idx_messages_label ON messages(label);
"""

_INSERT_SESSION = """
INSERT OR IGNORE INTO sessions (id, started_at, version) VALUES (?, ?, ?)
"""

_SELECT_SESSIONS = """
SELECT id, started_at, version FROM sessions ORDER BY started_at ASC
"""

_INSERT_MESSAGE = """
INSERT INTO messages
    (created_at, label, level, session, text, file, function, line, metadata)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

_MESSAGE_COLUMNS = (
    "created_at, label, level, session, text, file, function, line, metadata"
)

_COUNT_MESSAGES = """
SELECT COUNT(*) FROM messages
"""

_DELETE_MESSAGES = """
DELETE FROM messages
"""


def _select_messages(
    label: str | None = None,
    level: StoreLevel | None = None,
    since: float | None = None,
) -> tuple[str, tuple[Any, ...]]:
    """Build a message query with optional filters."""
    clauses: list[str] = []
    params: list[Any] = []
    if since is not None:
        clauses.append("created_at > ?")
        params.append(since)
    if label is not None:
        clauses.append("label = ?")
        params.append(label)
    if level is not None:
        clauses.append("level = ?")
        params.append(int(level))
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
    query = (
        f"SELECT {_MESSAGE_COLUMNS} FROM messages{where}"
        " ORDER BY created_at ASC, id ASC"
    )
    return query, tuple(params)


def _from_row(row: sqlite3.Row | aiosqlite.Row | tuple[Any, ...]) -> LoggerMessage:
    return LoggerMessage(
        created_at=row[0],
        label=row[1],
        level=StoreLevel(row[2]),
        session=row[3],
        text=row[4],
        file=row[5],
        function=row[6],
        line=row[7],
        metadata=_safe_json_loads(row[8]),
    )


class SQLiteLoggerStore(SQLiteStorageBase):
    """SQLite implementation of LoggerStorePort.

    Every store instance starts a new session, recorded in the sessions
    table, and stamps each message it writes with that session's id.
    Appends and queries use the standard sqlite3 module; read() and
    count() use aiosqlite for async contexts. File databases use WAL
    mode so several processes and threads can share one file.

    Example:
        ```python
        store = SQLiteLoggerStore("logs.db")
        handler = PersistentLogHandler("com.example.app", store=store)
        ```
    """

    def __init__(
        self, db_path: str, configuration: StoreConfiguration | None = None
    ) -> None:
        super().__init__(db_path, _SCHEMA)
        self._configuration = configuration or StoreConfiguration()
        self._closed = False
        self._session = LoggerSession(
            id=uuid.uuid4().hex,
            started_at=self._configuration.make_current_date(),
            version=self._configuration.version,
        )
        with self.sync_connection() as conn:
            conn.execute(
                _INSERT_SESSION,
                (self._session.id, self._session.started_at, self._session.version),
            )
            conn.commit()
        logger.debug("Opened log store %s (session %s)", db_path, self._session.id)

    @property
    def session(self) -> LoggerSession:
        """The session this store instance writes messages into."""
        return self._session

    @property
    def configuration(self) -> StoreConfiguration:
        return self._configuration

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosedError(f"Log store {self.db_path} is closed")

    def store_message(
        self,
        *,
        label: str,
        level: StoreLevel,
        message: str,
        metadata: Mapping[str, StoreMetadataValue] | None = None,
        file: str = "",
        function: str = "",
        line: int = 0,
    ) -> None:
        """Append a message to the current session."""
        self._check_open()
        row = (
            self._configuration.make_current_date(),
            label,
            int(level),
            self._session.id,
            message,
            source_filename(file),
            function,
            line,
            json.dumps(metadata_text(metadata)),
        )
        with self.sync_connection() as conn:
            conn.execute(_INSERT_MESSAGE, row)
            conn.commit()

    def messages(
        self, label: str | None = None, level: StoreLevel | None = None
    ) -> list[LoggerMessage]:
        """Return stored messages, optionally filtered by label and level.

        Messages are ordered by creation time, then by insertion order.
        """
        self._check_open()
        query, params = _select_messages(label=label, level=level)
        with self.sync_connection() as conn:
            return [_from_row(row) for row in conn.execute(query, params)]

    def all_messages(self) -> list[LoggerMessage]:
        """Return every stored message, across all sessions."""
        return self.messages()

    def sessions(self) -> list[LoggerSession]:
        """Return every session recorded in the database."""
        self._check_open()
        with self.sync_connection() as conn:
            return [
                LoggerSession(id=row[0], started_at=row[1], version=row[2])
                for row in conn.execute(_SELECT_SESSIONS)
            ]

    def remove_all(self) -> None:
        """Delete every stored message. Sessions are kept."""
        self._check_open()
        with self.sync_connection() as conn:
            conn.execute(_DELETE_MESSAGES)
            conn.commit()

    async def read(
        self, since: float = 0, label: str | None = None
    ) -> AsyncIterator[LoggerMessage]:
        """Read messages created after ``since``, optionally for one label."""
        self._check_open()
        query, params = _select_messages(label=label, since=since)
        async with self.async_connection() as db:
            async with db.execute(query, params) as cursor:
                async for row in cursor:
                    yield _from_row(row)

    async def count(self) -> int:
        """Return total number of stored messages."""
        self._check_open()
        async with self.async_connection() as db:
            async with db.execute(_COUNT_MESSAGES) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0

    def close(self) -> None:
        """Close the store. A :memory: database is discarded."""
        if self._closed:
            return
        self._sync_manager.close()
        self._closed = True
        logger.debug("Closed log store %s (session %s)", self.db_path, self._session.id)

    def __enter__(self) -> "SQLiteLoggerStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
