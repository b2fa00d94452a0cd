"""Store configuration and shared-store path resolution."""

import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from keeplog import __version__

STORE_PATH_ENV = "KEEPLOG_STORE_PATH"

_DEFAULT_STORE_DIR = ".keeplog"
_DEFAULT_STORE_FILE = "current.db"


@dataclass(frozen=True)
class StoreConfiguration:
    """Configuration shared by the store implementations.

    Attributes:
        make_current_date: Clock used to timestamp sessions and messages.
            Tests inject a fixed clock here.
        version: Version string recorded with every new session.
    """

    make_current_date: Callable[[], float] = time.time
    version: str = __version__


def shared_store_path() -> Path:
    """Return the database path used by the shared store.

    Reads KEEPLOG_STORE_PATH, falling back to ~/.keeplog/current.db.
    """
    raw = os.environ.get(STORE_PATH_ENV, "").strip()
    if raw:
        return Path(raw).expanduser()
    return Path.home() / _DEFAULT_STORE_DIR / _DEFAULT_STORE_FILE
