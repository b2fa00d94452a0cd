"""Exceptions raised by log stores."""


class LoggerStoreError(Exception):
    """Base class for errors raised by a log store."""


class StoreClosedError(LoggerStoreError):
    """Raised when a closed store is written to or read from."""
