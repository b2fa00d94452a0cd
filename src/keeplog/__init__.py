"""keeplog - persistent structured logging.

Routes log calls through a small logging facade into a persistent log
store, merging per-handler, per-call and provider metadata on the way.
"""

__version__ = "0.1.0"

from keeplog.adapters.handler import PersistentLogHandler  # noqa: E402
from keeplog.adapters.logging import KeeplogHandler  # noqa: E402
from keeplog.adapters.storage import (  # noqa: E402
    InMemoryLoggerStore,
    SQLiteLoggerStore,
    reset_shared_store,
    shared_store,
)
from keeplog.adapters.stream import MultiplexLogHandler, StreamLogHandler  # noqa: E402
from keeplog.core.config import StoreConfiguration  # noqa: E402
from keeplog.core.exceptions import LoggerStoreError, StoreClosedError  # noqa: E402
from keeplog.core.levels import Level, StoreLevel  # noqa: E402
from keeplog.core.metadata import MetadataProvider  # noqa: E402
from keeplog.core.models import (  # noqa: E402
    LoggerMessage,
    LoggerSession,
    MetadataArray,
    MetadataDictionary,
    MetadataString,
    MetadataStringConvertible,
    MetadataValue,
)
from keeplog.core.ports import LoggerStorePort, LogHandler  # noqa: E402
from keeplog.facade import Logger, LoggingSystem  # noqa: E402

__all__ = [
    "InMemoryLoggerStore",
    "KeeplogHandler",
    "Level",
    "LogHandler",
    "Logger",
    "LoggerMessage",
    "LoggerSession",
    "LoggerStoreError",
    "LoggerStorePort",
    "LoggingSystem",
    "MetadataArray",
    "MetadataDictionary",
    "MetadataProvider",
    "MetadataString",
    "MetadataStringConvertible",
    "MetadataValue",
    "MultiplexLogHandler",
    "PersistentLogHandler",
    "SQLiteLoggerStore",
    "StoreClosedError",
    "StoreConfiguration",
    "StoreLevel",
    "StreamLogHandler",
    "__version__",
    "reset_shared_store",
    "shared_store",
]
