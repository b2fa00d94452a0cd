"""Severity levels for the logging facade and the log store.

The facade and the store each carry their own enumeration. The mapping
between them is total and order-preserving in both directions.
"""

from enum import Enum, IntEnum
from functools import total_ordering


@total_ordering
class Level(Enum):
    """Facade-side severity level, ordered from least to most severe."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        """Position of this level in the severity order (0 = trace)."""
        return _LEVEL_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.severity < other.severity


_LEVEL_ORDER: tuple[Level, ...] = tuple(Level)


class StoreLevel(IntEnum):
    """Store-side severity level, persisted as an integer."""

    TRACE = 1
    DEBUG = 2
    INFO = 3
    NOTICE = 4
    WARNING = 5
    ERROR = 6
    CRITICAL = 7


_TO_STORE: dict[Level, StoreLevel] = {
    Level.TRACE: StoreLevel.TRACE,
    Level.DEBUG: StoreLevel.DEBUG,
    Level.INFO: StoreLevel.INFO,
    Level.NOTICE: StoreLevel.NOTICE,
    Level.WARNING: StoreLevel.WARNING,
    Level.ERROR: StoreLevel.ERROR,
    Level.CRITICAL: StoreLevel.CRITICAL,
}

_FROM_STORE: dict[StoreLevel, Level] = {
    store_level: level for level, store_level in _TO_STORE.items()
}


def to_store_level(level: Level) -> StoreLevel:
    """Translate a facade level into the store's level."""
    return _TO_STORE[level]


def from_store_level(level: StoreLevel) -> Level:
    """Translate a store level back into the facade's level."""
    return _FROM_STORE[level]


def as_level(value: Level | str) -> Level:
    """Return ``value`` as a Level, parsing names case-insensitively.

    Raises:
        ValueError: If a name is not one of the seven levels.
    """
    if isinstance(value, Level):
        return value
    try:
        return Level(value.strip().lower())
    except ValueError:
        valid = ", ".join(level.value for level in Level)
        raise ValueError(f"Invalid level {value!r}. Must be one of: {valid}") from None
