"""Core domain models for metadata values and stored log messages."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from keeplog.core.levels import StoreLevel

# --- Facade-side metadata values ---


@dataclass(frozen=True)
class MetadataString:
    """A plain text metadata value."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class MetadataStringConvertible:
    """An arbitrary object that is reduced to its text form when rendered.

    The text is computed with ``str(value)`` every time it is needed, so an
    object whose text changes over time is rendered as it is at log time.
    """

    value: object

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class MetadataArray:
    """An ordered list of metadata values."""

    values: tuple[MetadataValue, ...] = ()

    def __str__(self) -> str:
        return "[" + ", ".join(str(v) for v in self.values) + "]"


@dataclass(frozen=True)
class MetadataDictionary:
    """A mapping of text keys to metadata values."""

    values: dict[str, MetadataValue] = field(default_factory=dict, hash=False)

    def __str__(self) -> str:
        return "[" + ", ".join(f"{k}: {v}" for k, v in self.values.items()) + "]"


MetadataValue = (
    MetadataString | MetadataStringConvertible | MetadataArray | MetadataDictionary
)

Metadata = dict[str, MetadataValue]

_METADATA_TYPES = (
    MetadataString,
    MetadataStringConvertible,
    MetadataArray,
    MetadataDictionary,
)


def metadata_value(obj: object) -> MetadataValue:
    """Lift a plain Python value into a MetadataValue.

    Strings become text, lists and tuples become arrays, mappings become
    dictionaries and anything else is kept as a describable object.
    Values that already are metadata values are returned unchanged.
    """
    if isinstance(obj, _METADATA_TYPES):
        return obj
    if isinstance(obj, str):
        return MetadataString(obj)
    if isinstance(obj, list | tuple):
        return MetadataArray(tuple(metadata_value(item) for item in obj))
    if isinstance(obj, Mapping):
        return MetadataDictionary(
            {str(key): metadata_value(item) for key, item in obj.items()}
        )
    return MetadataStringConvertible(obj)


def lift_metadata(metadata: Mapping[str, object] | None) -> Metadata:
    """Lift every value of a plain mapping with metadata_value()."""
    if not metadata:
        return {}
    return {key: metadata_value(value) for key, value in metadata.items()}


# --- Store-side (persistable) metadata values ---


@dataclass(frozen=True)
class StoreString:
    """Persistable text value."""

    value: str


@dataclass(frozen=True)
class StoreStringConvertible:
    """Persistable text captured from a describable object at conversion time."""

    value: str


StoreMetadataValue = StoreString | StoreStringConvertible

StoreMetadata = dict[str, StoreMetadataValue]


# --- Stored records ---


@dataclass(frozen=True)
class LoggerSession:
    """A store session, started once per store instance.

    Attributes:
        id: Unique session identifier (UUID4 hex string).
        started_at: Unix timestamp in seconds.
        version: Version string recorded with the session.
    """

    id: str
    started_at: float
    version: str = ""


@dataclass(frozen=True)
class LoggerMessage:
    """A persisted log message.

    Attributes:
        created_at: Unix timestamp in seconds, taken from the store's clock.
        label: Label of the handler that logged the message.
        level: Store severity level.
        text: The log message.
        session: Id of the store session the message was written in.
        file: Final path component of the source file.
        function: Name of the calling function.
        line: Line number in the source file.
        metadata: Persisted key-value metadata as text.
    """

    created_at: float
    label: str
    level: StoreLevel
    text: str
    session: str
    file: str = ""
    function: str = ""
    line: int = 0
    metadata: dict[str, str] = field(default_factory=dict)


def source_filename(path: str) -> str:
    """Return the final component of a source path ("" stays "")."""
    return os.path.basename(path)


def metadata_text(metadata: Mapping[str, StoreMetadataValue] | None) -> dict[str, str]:
    """Flatten persistable metadata into the text map a store records."""
    if not metadata:
        return {}
    return {key: value.value for key, value in metadata.items()}
