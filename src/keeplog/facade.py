"""Logger facade and process-wide handler bootstrap.

Application code logs through Logger. Which handler a Logger uses is
decided once per process with LoggingSystem.bootstrap().
"""

import sys
import threading
from collections.abc import Callable, Mapping

from keeplog.adapters.stream import StreamLogHandler
from keeplog.core.levels import Level, as_level
from keeplog.core.metadata import MetadataProvider
from keeplog.core.models import MetadataValue
from keeplog.core.ports import LogHandler

HandlerFactory = Callable[..., LogHandler]


class LoggingSystem:
    """Holds the process-wide handler factory and metadata provider.

    Example:
        ```python
        LoggingSystem.bootstrap(
            lambda label: MultiplexLogHandler(
                [
                    PersistentLogHandler(label, store=store),
                    StreamLogHandler.standard_output(label),
                ]
            )
        )
        ```
    """

    _lock = threading.Lock()
    _factory: HandlerFactory = StreamLogHandler.standard_error
    _metadata_provider: MetadataProvider | None = None
    _initialized = False

    @classmethod
    def bootstrap(
        cls,
        factory: HandlerFactory,
        metadata_provider: MetadataProvider | None = None,
    ) -> None:
        """Install the handler factory. May be called once per process.

        With a metadata provider the factory is called as
        ``factory(label, metadata_provider)``, otherwise as ``factory(label)``.

        Raises:
            RuntimeError: If the logging system was already bootstrapped.
        """
        with cls._lock:
            if cls._initialized:
                raise RuntimeError(
                    "logging system can only be initialized once per process"
                )
            cls._install(factory, metadata_provider)

    @classmethod
    def _bootstrap_internal(
        cls,
        factory: HandlerFactory,
        metadata_provider: MetadataProvider | None = None,
    ) -> None:
        """Install a factory even if already bootstrapped (tests)."""
        with cls._lock:
            cls._install(factory, metadata_provider)

    @classmethod
    def _install(
        cls, factory: HandlerFactory, metadata_provider: MetadataProvider | None
    ) -> None:
        cls._factory = factory
        cls._metadata_provider = metadata_provider
        cls._initialized = True

    @classmethod
    def metadata_provider(cls) -> MetadataProvider | None:
        """The provider installed with bootstrap(), if any."""
        return cls._metadata_provider

    @classmethod
    def make_handler(cls, label: str) -> LogHandler:
        """Create a handler for label with the installed factory."""
        with cls._lock:
            factory = cls._factory
            provider = cls._metadata_provider
        if provider is not None:
            return factory(label, provider)
        return factory(label)


class Logger:
    """Entry point for application logging.

    Every call captures the caller's file, function and line, is dropped
    if its level is below the handler's ``log_level``, and is otherwise
    passed to the handler.

    Example:
        ```python
        logger = Logger("com.example.app")
        logger["request_id"] = "abc123"
        logger.warning("Slow response", {"elapsed_ms": "1500"})
        ```
    """

    def __init__(self, label: str, handler: LogHandler | None = None) -> None:
        self._label = label
        if handler is None:
            handler = LoggingSystem.make_handler(label)
        self._handler = handler

    @property
    def label(self) -> str:
        return self._label

    @property
    def handler(self) -> LogHandler:
        return self._handler

    @property
    def log_level(self) -> Level:
        return self._handler.log_level

    @log_level.setter
    def log_level(self, level: Level | str) -> None:
        self._handler.log_level = as_level(level)

    def __getitem__(self, key: str) -> MetadataValue | None:
        return self._handler[key]

    def __setitem__(self, key: str, value: object) -> None:
        self._handler[key] = value

    def _log(
        self,
        level: Level,
        message: object,
        metadata: Mapping[str, object] | None,
    ) -> None:
        if level < self._handler.log_level:
            return
        # 0 = _log, 1 = public method, 2 = caller
        frame = sys._getframe(2)
        self._handler.log(
            level,
            str(message),
            metadata,
            file=frame.f_code.co_filename,
            function=frame.f_code.co_name,
            line=frame.f_lineno,
        )

    def log(
        self,
        level: Level | str,
        message: object,
        metadata: Mapping[str, object] | None = None,
    ) -> None:
        """Log a message at the given level."""
        self._log(as_level(level), message, metadata)

    def trace(
        self, message: object, metadata: Mapping[str, object] | None = None
    ) -> None:
        self._log(Level.TRACE, message, metadata)

    def debug(
        self, message: object, metadata: Mapping[str, object] | None = None
    ) -> None:
        self._log(Level.DEBUG, message, metadata)

    def info(
        self, message: object, metadata: Mapping[str, object] | None = None
    ) -> None:
        self._log(Level.INFO, message, metadata)

    def notice(
        self, message: object, metadata: Mapping[str, object] | None = None
    ) -> None:
        self._log(Level.NOTICE, message, metadata)

    def warning(
        self, message: object, metadata: Mapping[str, object] | None = None
    ) -> None:
        self._log(Level.WARNING, message, metadata)

    def error(
        self, message: object, metadata: Mapping[str, object] | None = None
    ) -> None:
        self._log(Level.ERROR, message, metadata)

    def critical(
        self, message: object, metadata: Mapping[str, object] | None = None
    ) -> None:
        self._log(Level.CRITICAL, message, metadata)
