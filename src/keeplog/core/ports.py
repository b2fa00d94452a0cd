"""Port interfaces for handlers and log stores.

These protocols define the contracts between the logging facade, the
handlers it dispatches to, and the stores handlers write to. Nothing
inherits from them; implementations satisfy them structurally.
"""

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from keeplog.core.levels import Level, StoreLevel
from keeplog.core.models import Metadata, MetadataValue, StoreMetadataValue


@runtime_checkable
class LogHandler(Protocol):
    """Port for handlers a Logger dispatches to.

    Adapters implementing this protocol receive every log call that passes
    the facade's level check. Examples: PersistentLogHandler,
    StreamLogHandler, MultiplexLogHandler.
    """

    log_level: Level
    metadata: Metadata

    def __getitem__(self, key: str) -> MetadataValue | None:
        """Return the handler metadata value for key, or None if unset."""
        ...

    def __setitem__(self, key: str, value: object) -> None:
        """Set (or, with None, remove) a handler metadata value."""
        ...

    def log(
        self,
        level: Level,
        message: str,
        metadata: Mapping[str, object] | None = None,
        file: str = "",
        function: str = "",
        line: int = 0,
    ) -> None:
        """Handle a single log call."""
        ...


@runtime_checkable
class LoggerStorePort(Protocol):
    """Port for appending messages to a log store.

    Examples: SQLiteLoggerStore, InMemoryLoggerStore.
    """

    def store_message(
        self,
        *,
        label: str,
        level: StoreLevel,
        message: str,
        metadata: Mapping[str, StoreMetadataValue] | None,
        file: str,
        function: str,
        line: int,
    ) -> None:
        """Append one message to the store.

        Raises whatever the store raises on failure; callers do not
        intercept it.
        """
        ...
