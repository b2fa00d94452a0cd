"""End-to-end tests: Logger -> PersistentLogHandler -> SQLiteLoggerStore."""

import io
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import pytest

from keeplog.adapters.handler import PersistentLogHandler
from keeplog.adapters.logging import KeeplogHandler
from keeplog.adapters.storage.sqlite_store import SQLiteLoggerStore
from keeplog.adapters.stream import MultiplexLogHandler, StreamLogHandler
from keeplog.core.levels import Level, StoreLevel
from keeplog.facade import Logger, LoggingSystem

pytestmark = [pytest.mark.tier(2), pytest.mark.storage]


class TestPersistentLogHandlerWithSQLite:
    """PersistentLogHandler writing to a file-backed SQLite store."""

    def test_persists_logged_messages(
        self,
        restore_logging_system,
        sqlite_store: SQLiteLoggerStore,
        fixed_clock: Callable[[], float],
    ) -> None:
        console = io.StringIO()
        LoggingSystem._bootstrap_internal(
            lambda label: MultiplexLogHandler(
                [
                    PersistentLogHandler(label, store=sqlite_store),
                    StreamLogHandler(label, console),
                ]
            )
        )

        logger1 = Logger("test.logger.1")
        logger1["test-uuid"] = "2f1c"
        logger1.log(Level.INFO, "This is a test message")

        logger2 = Logger("test.logger.2")
        logger2.log(Level.CRITICAL, "A second test message", {"foo": "bar"})

        messages = sqlite_store.all_messages()
        assert len(messages) == 2

        first = next(m for m in messages if m.label == "test.logger.1")
        assert first.text == "This is a test message"
        assert first.created_at == fixed_clock()
        assert first.session == sqlite_store.session.id
        assert first.metadata == {"test-uuid": "2f1c"}

        second = next(m for m in messages if m.label == "test.logger.2")
        assert second.text == "A second test message"
        assert second.level is StoreLevel.CRITICAL
        assert second.session == sqlite_store.session.id
        assert second.metadata == {"foo": "bar"}

        assert "This is a test message" in console.getvalue()

    def test_stores_filename_from_logger_call_site(
        self, sqlite_store: SQLiteLoggerStore
    ) -> None:
        logger = Logger("app", PersistentLogHandler("app", store=sqlite_store))

        logger.info("a")

        [message] = sqlite_store.all_messages()
        assert message.file == "test_persistent_handler_sqlite.py"
        assert message.function == "test_stores_filename_from_logger_call_site"

    def test_concurrent_handlers_sharing_one_store(
        self, sqlite_store: SQLiteLoggerStore
    ) -> None:
        """Two handlers with distinct labels each log once, concurrently."""
        handlers = [
            PersistentLogHandler("first", store=sqlite_store),
            PersistentLogHandler("second", store=sqlite_store),
        ]

        with ThreadPoolExecutor(max_workers=2) as pool:
            list(pool.map(lambda h: h.log(Level.INFO, f"from {h.label}"), handlers))

        messages = sqlite_store.all_messages()
        assert len(messages) == 2
        assert {m.label: m.text for m in messages} == {
            "first": "from first",
            "second": "from second",
        }

    def test_concurrent_writes_to_memory_database(self) -> None:
        with SQLiteLoggerStore(":memory:") as store:
            handlers = [PersistentLogHandler(f"h{i}", store=store) for i in range(4)]

            def work(h: PersistentLogHandler) -> None:
                for n in range(10):
                    h.log(Level.DEBUG, str(n))

            with ThreadPoolExecutor(max_workers=4) as pool:
                list(pool.map(work, handlers))

            assert len(store.all_messages()) == 40

    def test_stdlib_logging_reaches_sqlite(
        self, sqlite_store: SQLiteLoggerStore
    ) -> None:
        logger = logging.getLogger("integration.stdlib")
        logger.handlers.clear()
        logger.propagate = False
        logger.setLevel(logging.INFO)
        logger.addHandler(KeeplogHandler(sqlite_store))
        try:
            logger.warning("Card declined", extra={"order": "42"})
        finally:
            logger.handlers.clear()

        [message] = sqlite_store.all_messages()
        assert message.label == "integration.stdlib"
        assert message.level is StoreLevel.WARNING
        assert message.metadata == {"order": "42"}
        assert message.function == "test_stdlib_logging_reaches_sqlite"
