"""Tests for port interfaces."""

import io
from collections.abc import Mapping

import pytest

from keeplog.adapters.handler import PersistentLogHandler
from keeplog.adapters.storage.in_memory import InMemoryLoggerStore
from keeplog.adapters.storage.sqlite_store import SQLiteLoggerStore
from keeplog.adapters.stream import MultiplexLogHandler, StreamLogHandler
from keeplog.core.levels import Level, StoreLevel
from keeplog.core.models import StoreMetadataValue
from keeplog.core.ports import LoggerStorePort, LogHandler

pytestmark = [pytest.mark.core, pytest.mark.tier(0)]


class TestLogHandlerPort:
    """Tests for LogHandler protocol."""

    def test_protocol_has_log_method(self) -> None:
        assert hasattr(LogHandler, "log")

    def test_handlers_satisfy_protocol(self, memory_store: InMemoryLoggerStore) -> None:
        """Handlers satisfy LogHandler without inheriting from it."""
        persistent = PersistentLogHandler("test", store=memory_store)
        stream = StreamLogHandler("test", io.StringIO())
        multiplex = MultiplexLogHandler([persistent, stream])

        for handler in (persistent, stream, multiplex):
            assert isinstance(handler, LogHandler)
            assert LogHandler not in type(handler).__mro__


class TestLoggerStorePort:
    """Tests for LoggerStorePort protocol."""

    def test_class_implementing_protocol_is_recognized(self) -> None:
        """A class with store_message() satisfies LoggerStorePort."""

        class FakeStore:
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
                pass

        assert isinstance(FakeStore(), LoggerStorePort)

    def test_stores_satisfy_protocol(self, log_db_path: str) -> None:
        with SQLiteLoggerStore(log_db_path) as sqlite_store:
            assert isinstance(sqlite_store, LoggerStorePort)
        assert isinstance(InMemoryLoggerStore(), LoggerStorePort)

    def test_level_is_not_a_store(self) -> None:
        assert not isinstance(Level.INFO, LoggerStorePort)
