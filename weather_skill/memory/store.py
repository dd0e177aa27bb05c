"""Slot memory abstractions and SQLite implementation."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from weather_skill.core.db import sqlite_connection
from weather_skill.core.errors import SerializationError

from .models import MemoryEntry

logger = logging.getLogger("weather.memory")


class MemoryStore(ABC):
    """Abstract interface for per-session slot memory and dialogue cursors.

    Every key is scoped by ``(plugin_id, session_id)`` so several skills can
    share one store without colliding.
    """

    @abstractmethod
    def set(self, plugin_id: str, session_id: str, key: str, value: Any) -> None:
        """Serialize and persist a slot value, overwriting any previous one."""

    @abstractmethod
    def get(self, plugin_id: str, session_id: str, key: str) -> tuple[str | None, bool]:
        """Return the serialized value and whether it was present."""

    @abstractmethod
    def has(self, plugin_id: str, session_id: str, key: str) -> bool:
        """Return True when a value is stored for the key."""

    @abstractmethod
    def clear(self, plugin_id: str, session_id: str, key: str) -> None:
        """Delete a stored value; missing keys are ignored."""

    @abstractmethod
    def load_cursor(self, plugin_id: str, session_id: str) -> int | None:
        """Return the persisted dialogue cursor, or None when never saved."""

    @abstractmethod
    def save_cursor(self, plugin_id: str, session_id: str, cursor: int) -> None:
        """Persist the dialogue cursor."""

    @abstractmethod
    def iter_sessions(self, plugin_id: str) -> Iterable[str]:
        """Iterate over session identifiers that hold memory or a cursor."""


class SQLiteMemoryStore(MemoryStore):
    """SQLite-backed memory store; each call runs in its own transaction."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create required tables if they do not exist."""

        with sqlite_connection(self.db_path) as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS memory (
                    plugin_id TEXT NOT NULL,
                    session_id TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (plugin_id, session_id, key)
                );

                CREATE TABLE IF NOT EXISTS dialogue_states (
                    plugin_id TEXT NOT NULL,
                    session_id TEXT NOT NULL,
                    cursor INTEGER NOT NULL DEFAULT 0,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (plugin_id, session_id)
                );
                """
            )

    def set(self, plugin_id: str, session_id: str, key: str, value: Any) -> None:
        payload = json_dumps(value)
        with sqlite_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO memory (plugin_id, session_id, key, value, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(plugin_id, session_id, key)
                DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                """,
                (plugin_id, session_id, key, payload, _now()),
            )
        logger.debug("Stored %s for session %s", key, session_id)

    def get(self, plugin_id: str, session_id: str, key: str) -> tuple[str | None, bool]:
        entry = self.get_entry(plugin_id, session_id, key)
        if entry is None:
            return None, False
        return entry.value, True

    def get_entry(self, plugin_id: str, session_id: str, key: str) -> MemoryEntry | None:
        with sqlite_connection(self.db_path) as conn:
            row = conn.execute(
                """
                SELECT session_id, key, value, updated_at
                FROM memory
                WHERE plugin_id = ? AND session_id = ? AND key = ?
                """,
                (plugin_id, session_id, key),
            ).fetchone()

        if row is None:
            return None
        return MemoryEntry(
            session_id=row["session_id"],
            key=row["key"],
            value=row["value"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def has(self, plugin_id: str, session_id: str, key: str) -> bool:
        with sqlite_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT 1 FROM memory WHERE plugin_id = ? AND session_id = ? AND key = ?",
                (plugin_id, session_id, key),
            ).fetchone()
        return row is not None

    def clear(self, plugin_id: str, session_id: str, key: str) -> None:
        with sqlite_connection(self.db_path) as conn:
            conn.execute(
                "DELETE FROM memory WHERE plugin_id = ? AND session_id = ? AND key = ?",
                (plugin_id, session_id, key),
            )

    def load_cursor(self, plugin_id: str, session_id: str) -> int | None:
        with sqlite_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT cursor FROM dialogue_states WHERE plugin_id = ? AND session_id = ?",
                (plugin_id, session_id),
            ).fetchone()
        return None if row is None else int(row["cursor"])

    def save_cursor(self, plugin_id: str, session_id: str, cursor: int) -> None:
        if cursor < 0:
            raise ValueError("cursor must not be negative")
        with sqlite_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO dialogue_states (plugin_id, session_id, cursor, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(plugin_id, session_id)
                DO UPDATE SET cursor=excluded.cursor, updated_at=excluded.updated_at
                """,
                (plugin_id, session_id, cursor, _now()),
            )

    def iter_sessions(self, plugin_id: str) -> Iterable[str]:
        with sqlite_connection(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT session_id FROM memory WHERE plugin_id = ?
                UNION
                SELECT session_id FROM dialogue_states WHERE plugin_id = ?
                ORDER BY session_id
                """,
                (plugin_id, plugin_id),
            )
            return [row["session_id"] for row in rows]


def json_dumps(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"))


def json_loads(value: str | None) -> Any:
    """Decode a stored blob, raising SerializationError when it is not valid JSON."""

    if value is None:
        raise SerializationError("no stored value")
    try:
        return json.loads(value)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"stored value is not valid JSON: {exc}") from exc


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
