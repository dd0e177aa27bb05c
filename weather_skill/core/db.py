"""SQLite connection handling for the memory store."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger("weather.db")

# Concurrent turns for different sessions share one database file.
BUSY_TIMEOUT_SECONDS = 5.0


@contextmanager
def sqlite_connection(path: Path, *, timeout: float = BUSY_TIMEOUT_SECONDS) -> Iterator[sqlite3.Connection]:
    """Open ``path`` for one unit of work.

    Rows come back as ``sqlite3.Row``. The block is one transaction: committed
    when it exits cleanly, rolled back and re-raised otherwise.
    """

    conn = sqlite3.connect(path, timeout=timeout)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:  # noqa: BLE001
        logger.debug("Rolling back transaction on %s", path)
        conn.rollback()
        raise
    finally:
        conn.close()
