"""Shared test fixtures for all test modules."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from keeplog.adapters.storage.in_memory import InMemoryLoggerStore
from keeplog.adapters.storage.shared import reset_shared_store
from keeplog.adapters.storage.sqlite_store import SQLiteLoggerStore
from keeplog.core.config import STORE_PATH_ENV, StoreConfiguration
from keeplog.facade import LoggingSystem

FIXED_TIME = 1702300000.0


@pytest.fixture
def log_db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for log store tests."""
    return str(tmp_path / "logs.db")


@pytest.fixture
def fixed_clock() -> Callable[[], float]:
    """Clock that always returns FIXED_TIME."""
    return lambda: FIXED_TIME


@pytest.fixture
def configuration(fixed_clock: Callable[[], float]) -> StoreConfiguration:
    """Store configuration with a fixed clock."""
    return StoreConfiguration(make_current_date=fixed_clock, version="test")


@pytest.fixture
def memory_store(configuration: StoreConfiguration) -> InMemoryLoggerStore:
    """Fixture providing an empty in-memory log store."""
    return InMemoryLoggerStore(configuration)


@pytest.fixture
def sqlite_store(
    log_db_path: str, configuration: StoreConfiguration
) -> Iterator[SQLiteLoggerStore]:
    """File-backed SQLite log store with proper cleanup."""
    store = SQLiteLoggerStore(log_db_path, configuration)
    yield store
    store.close()


@pytest.fixture(scope="session", autouse=True)
def session_shared_store(tmp_path_factory: pytest.TempPathFactory) -> Iterator[Path]:
    """Keep the shared store out of the home directory for the whole run."""
    path = tmp_path_factory.mktemp("shared") / "current.db"
    with pytest.MonkeyPatch.context() as mp:
        mp.setenv(STORE_PATH_ENV, str(path))
        yield path
    reset_shared_store()


@pytest.fixture
def isolated_shared_store(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Point the shared store at a fresh temporary file for one test."""
    path = tmp_path / "shared" / "current.db"
    monkeypatch.setenv(STORE_PATH_ENV, str(path))
    reset_shared_store()
    yield path
    reset_shared_store()


@pytest.fixture
def restore_logging_system() -> Iterator[type[LoggingSystem]]:
    """Restore the LoggingSystem factory after a test bootstraps it."""
    saved = (
        LoggingSystem._factory,
        LoggingSystem._metadata_provider,
        LoggingSystem._initialized,
    )
    yield LoggingSystem
    (
        LoggingSystem._factory,
        LoggingSystem._metadata_provider,
        LoggingSystem._initialized,
    ) = saved
