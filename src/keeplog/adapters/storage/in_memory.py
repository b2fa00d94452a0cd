"""In-memory log store."""

import threading
import uuid
from collections.abc import AsyncIterator, Mapping

from keeplog.core.config import StoreConfiguration
from keeplog.core.levels import StoreLevel
from keeplog.core.models import (
    LoggerMessage,
    LoggerSession,
    StoreMetadataValue,
    metadata_text,
    source_filename,
)


class InMemoryLoggerStore:
    """In-memory implementation of LoggerStorePort.

    Keeps messages in a list guarded by a lock. Suitable for testing and
    low-volume applications where persistence is not required.
    """

    def __init__(self, configuration: StoreConfiguration | None = None) -> None:
        self._configuration = configuration or StoreConfiguration()
        self._lock = threading.Lock()
        self._messages: list[LoggerMessage] = []
        self._session = LoggerSession(
            id=uuid.uuid4().hex,
            started_at=self._configuration.make_current_date(),
            version=self._configuration.version,
        )

    @property
    def session(self) -> LoggerSession:
        return self._session

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
        entry = LoggerMessage(
            created_at=self._configuration.make_current_date(),
            label=label,
            level=level,
            text=message,
            session=self._session.id,
            file=source_filename(file),
            function=function,
            line=line,
            metadata=metadata_text(metadata),
        )
        with self._lock:
            self._messages.append(entry)

    def messages(
        self, label: str | None = None, level: StoreLevel | None = None
    ) -> list[LoggerMessage]:
        """Return stored messages in append order, optionally filtered."""
        with self._lock:
            snapshot = list(self._messages)
        return [
            m
            for m in snapshot
            if (label is None or m.label == label)
            and (level is None or m.level == level)
        ]

    def all_messages(self) -> list[LoggerMessage]:
        """Return every stored message in append order."""
        return self.messages()

    def remove_all(self) -> None:
        """Delete every stored message."""
        with self._lock:
            self._messages.clear()

    async def read(
        self, since: float = 0, label: str | None = None
    ) -> AsyncIterator[LoggerMessage]:
        """Read messages created after ``since``, ordered by creation time."""
        filtered = [m for m in self.messages(label=label) if m.created_at > since]
        for message in sorted(filtered, key=lambda m: m.created_at):
            yield message

    async def count(self) -> int:
        """Return total number of stored messages."""
        with self._lock:
            return len(self._messages)
