"""Stream and multiplex log handlers.

StreamLogHandler prints log calls as text lines; MultiplexLogHandler fans
calls out to several handlers, e.g. a PersistentLogHandler plus a
StreamLogHandler for the console.
"""

import sys
import threading
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import TextIO

from keeplog.core.levels import Level, as_level
from keeplog.core.metadata import (
    MetadataProvider,
    as_metadata_provider,
    merge_metadata,
)
from keeplog.core.models import (
    Metadata,
    MetadataValue,
    lift_metadata,
    metadata_value,
)
from keeplog.core.ports import LogHandler


def _prettify(metadata: Metadata) -> str:
    return " ".join(f"{key}={metadata[key]}" for key in sorted(metadata))


class StreamLogHandler:
    """Log handler that writes one line per log call to a text stream.

    Line format: ``<timestamp> <level> <label> : <key=value ...> <message>``.
    """

    def __init__(
        self,
        label: str,
        stream: TextIO,
        metadata_provider: MetadataProvider
        | Callable[[], Mapping[str, object]]
        | None = None,
    ) -> None:
        self._label = label
        self._stream = stream
        self._metadata_provider = as_metadata_provider(metadata_provider)
        self._lock = threading.Lock()
        self._metadata: Metadata = {}
        self._log_level = Level.INFO

    @classmethod
    def standard_output(
        cls,
        label: str,
        metadata_provider: MetadataProvider | None = None,
    ) -> "StreamLogHandler":
        """Create a handler writing to sys.stdout."""
        return cls(label, sys.stdout, metadata_provider)

    @classmethod
    def standard_error(
        cls,
        label: str,
        metadata_provider: MetadataProvider | None = None,
    ) -> "StreamLogHandler":
        """Create a handler writing to sys.stderr."""
        return cls(label, sys.stderr, metadata_provider)

    @property
    def label(self) -> str:
        return self._label

    @property
    def log_level(self) -> Level:
        with self._lock:
            return self._log_level

    @log_level.setter
    def log_level(self, level: Level | str) -> None:
        level = as_level(level)
        with self._lock:
            self._log_level = level

    @property
    def metadata(self) -> Metadata:
        with self._lock:
            return dict(self._metadata)

    @metadata.setter
    def metadata(self, metadata: Mapping[str, object]) -> None:
        lifted = lift_metadata(metadata)
        with self._lock:
            self._metadata = lifted

    def __getitem__(self, key: str) -> MetadataValue | None:
        with self._lock:
            return self._metadata.get(key)

    def __setitem__(self, key: str, value: object) -> None:
        with self._lock:
            if value is None:
                self._metadata.pop(key, None)
            else:
                self._metadata[key] = metadata_value(value)

    def log(
        self,
        level: Level,
        message: str,
        metadata: Mapping[str, object] | None = None,
        file: str = "",
        function: str = "",
        line: int = 0,
    ) -> None:
        """Write the call as a single line and flush the stream."""
        with self._lock:
            static = dict(self._metadata)
        merged = merge_metadata(
            static, self._metadata_provider, lift_metadata(metadata)
        )
        timestamp = datetime.now().astimezone().isoformat(timespec="seconds")
        parts = [timestamp, level.value, self._label, ":"]
        if merged:
            parts.append(_prettify(merged))
        parts.append(message)
        self._stream.write(" ".join(parts) + "\n")
        self._stream.flush()


class MultiplexLogHandler:
    """Log handler that forwards each call to several handlers.

    Each child keeps its own level; a call reaches only the children whose
    level admits it. Reading ``log_level`` returns the most permissive
    child level, and setting it sets every child.
    """

    def __init__(self, handlers: Iterable[LogHandler]) -> None:
        self._handlers = list(handlers)
        if not self._handlers:
            raise ValueError("MultiplexLogHandler requires at least one handler")

    @property
    def handlers(self) -> list[LogHandler]:
        return list(self._handlers)

    @property
    def log_level(self) -> Level:
        return min(handler.log_level for handler in self._handlers)

    @log_level.setter
    def log_level(self, level: Level | str) -> None:
        level = as_level(level)
        for handler in self._handlers:
            handler.log_level = level

    @property
    def metadata(self) -> Metadata:
        """Merged metadata of all children; earlier children win."""
        merged: Metadata = {}
        for handler in reversed(self._handlers):
            merged.update(handler.metadata)
        return merged

    @metadata.setter
    def metadata(self, metadata: Mapping[str, object]) -> None:
        for handler in self._handlers:
            handler.metadata = lift_metadata(metadata)

    def __getitem__(self, key: str) -> MetadataValue | None:
        for handler in self._handlers:
            value = handler[key]
            if value is not None:
                return value
        return None

    def __setitem__(self, key: str, value: object) -> None:
        for handler in self._handlers:
            handler[key] = value

    def log(
        self,
        level: Level,
        message: str,
        metadata: Mapping[str, object] | None = None,
        file: str = "",
        function: str = "",
        line: int = 0,
    ) -> None:
        for handler in self._handlers:
            if level >= handler.log_level:
                handler.log(level, message, metadata, file, function, line)
