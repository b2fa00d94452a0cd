"""Python logging handler adapter for keeplog.

This adapter bridges Python's standard library logging module to the
persistent handlers, so records logged with ``logging.getLogger(...)`` end
up in a log store with their extra fields as metadata.
"""

import logging
import threading
import traceback
from collections.abc import Callable, Mapping

from keeplog.adapters.handler import PersistentLogHandler
from keeplog.core.levels import Level
from keeplog.core.metadata import MetadataProvider, as_metadata_provider
from keeplog.core.ports import LoggerStorePort

TRACE_LEVEL = 5
NOTICE_LEVEL = 25

# Records from the library's own loggers are never forwarded
_INTERNAL_LOGGER_PREFIX = "keeplog"

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


def level_from_levelno(levelno: int) -> Level:
    """Map a logging level number to the nearest Level at or below it."""
    if levelno >= logging.CRITICAL:
        return Level.CRITICAL
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARNING
    if levelno >= NOTICE_LEVEL:
        return Level.NOTICE
    if levelno >= logging.INFO:
        return Level.INFO
    if levelno >= logging.DEBUG:
        return Level.DEBUG
    return Level.TRACE


def _is_internal(name: str) -> bool:
    return name == _INTERNAL_LOGGER_PREFIX or name.startswith(
        _INTERNAL_LOGGER_PREFIX + "."
    )


class KeeplogHandler(logging.Handler):
    """Logging handler that writes log records to a log store.

    Each logger name gets its own PersistentLogHandler, labelled with that
    name and created on first use. All of them share this handler's store
    and metadata provider.

    Example:
        ```python
        from keeplog import KeeplogHandler, SQLiteLoggerStore

        store = SQLiteLoggerStore("logs.db")
        logging.getLogger().addHandler(KeeplogHandler(store))
        ```
    """

    def __init__(
        self,
        store: LoggerStorePort | None = None,
        metadata_provider: MetadataProvider
        | Callable[[], Mapping[str, object]]
        | None = None,
        level: int = logging.NOTSET,
    ) -> None:
        """Initialize the handler with a log store.

        Args:
            store: Target store. Defaults to the shared store.
            metadata_provider: Optional provider invoked for every record.
            level: Minimum logging level for this handler.
        """
        super().__init__(level)
        logging.addLevelName(TRACE_LEVEL, "TRACE")
        logging.addLevelName(NOTICE_LEVEL, "NOTICE")
        self._store = store
        self._metadata_provider = as_metadata_provider(metadata_provider)
        self._handlers: dict[str, PersistentLogHandler] = {}
        self._handlers_lock = threading.Lock()

    def handler_for(self, name: str) -> PersistentLogHandler:
        """Return the persistent handler used for records of logger ``name``.

        Metadata set on the returned handler is attached to every later
        record from that logger.
        """
        with self._handlers_lock:
            handler = self._handlers.get(name)
            if handler is None:
                handler = PersistentLogHandler(
                    name,
                    metadata_provider=self._metadata_provider,
                    store=self._store,
                )
                handler.log_level = Level.TRACE
                self._handlers[name] = handler
            return handler

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record to the store.

        Args:
            record: The log record to emit.
        """
        if _is_internal(record.name):
            return

        # Add any extra attributes passed via logging call
        metadata: dict[str, object] = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_LOGRECORD_ATTRS and not key.startswith("_")
        }

        # Extract exception info if present
        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            if exc_type is not None:
                metadata["exc_type"] = exc_type.__name__
            if exc_value is not None:
                metadata["exc_message"] = str(exc_value)
            if exc_tb is not None:
                metadata["exc_traceback"] = "".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                )

        self.handler_for(record.name).log(
            level_from_levelno(record.levelno),
            record.getMessage(),
            metadata,
            file=record.pathname,
            function=record.funcName or "",
            line=record.lineno,
        )
