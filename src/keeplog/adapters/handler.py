"""Persistent log handler.

Bridges the Logger facade to a LoggerStorePort. Each call merges the
handler's metadata sources, narrows the result to persistable values,
translates the level and appends one message to the store.
"""

import threading
from collections.abc import Callable, Mapping

from keeplog.adapters.storage.shared import shared_store
from keeplog.core.levels import Level, as_level, to_store_level
from keeplog.core.metadata import (
    MetadataProvider,
    as_metadata_provider,
    merge_metadata,
    persistable_metadata,
)
from keeplog.core.models import Metadata, MetadataValue, lift_metadata, metadata_value
from keeplog.core.ports import LoggerStorePort


class PersistentLogHandler:
    """Log handler that writes every log call to a log store.

    If no store is given, the process-wide shared store is used.

    Example:
        ```python
        from keeplog import LoggingSystem, Logger, PersistentLogHandler

        LoggingSystem.bootstrap(PersistentLogHandler)

        logger = Logger("com.example.app")
        logger.info("This message will be stored persistently")
        ```
    """

    def __init__(
        self,
        label: str,
        metadata_provider: MetadataProvider
        | Callable[[], Mapping[str, object]]
        | None = None,
        store: LoggerStorePort | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            label: Label recorded with every message, usually the logger label.
            metadata_provider: Optional provider invoked on every log call.
            store: Target store. Defaults to the shared store.
        """
        if store is None:
            store = shared_store()
        self._label = label
        self._metadata_provider = as_metadata_provider(metadata_provider)
        self._store = store
        self._lock = threading.Lock()
        self._metadata: Metadata = {}
        self._log_level = Level.INFO

    @property
    def label(self) -> str:
        return self._label

    @property
    def store(self) -> LoggerStorePort:
        return self._store

    @property
    def metadata_provider(self) -> MetadataProvider | None:
        return self._metadata_provider

    @property
    def log_level(self) -> Level:
        """Minimum level; enforced by the Logger, not by log()."""
        with self._lock:
            return self._log_level

    @log_level.setter
    def log_level(self, level: Level | str) -> None:
        level = as_level(level)
        with self._lock:
            self._log_level = level

    @property
    def metadata(self) -> Metadata:
        """Copy of the metadata set on this handler."""
        with self._lock:
            return dict(self._metadata)

    @metadata.setter
    def metadata(self, metadata: Mapping[str, object]) -> None:
        lifted = lift_metadata(metadata)
        with self._lock:
            self._metadata = lifted

    def __getitem__(self, key: str) -> MetadataValue | None:
        """Return the handler metadata value for key, or None if unset."""
        with self._lock:
            return self._metadata.get(key)

    def __setitem__(self, key: str, value: object) -> None:
        """Set a handler metadata value; assigning None removes the key."""
        lifted = None if value is None else metadata_value(value)
        with self._lock:
            if lifted is None:
                self._metadata.pop(key, None)
            else:
                self._metadata[key] = lifted

    def __delitem__(self, key: str) -> None:
        with self._lock:
            del self._metadata[key]

    def log(
        self,
        level: Level,
        message: str,
        metadata: Mapping[str, object] | None = None,
        file: str = "",
        function: str = "",
        line: int = 0,
    ) -> None:
        """Write one message to the store.

        Store errors and errors raised while rendering describable metadata
        values propagate to the caller.
        """
        with self._lock:
            static = dict(self._metadata)
        merged = merge_metadata(
            static, self._metadata_provider, lift_metadata(metadata)
        )
        self._store.store_message(
            label=self._label,
            level=to_store_level(level),
            message=message,
            metadata=persistable_metadata(merged),
            file=file,
            function=function,
            line=line,
        )

    def __repr__(self) -> str:
        return f"PersistentLogHandler(label={self._label!r}, store={self._store!r})"
