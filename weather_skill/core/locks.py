"""Per-session mutual exclusion for dialogue turns."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class _SessionLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class SessionLocks:
    """Hand out one lock per (plugin, session) so turns for a session never interleave.

    Entries are reference-counted and dropped once no turn holds or waits on
    them, so idle sessions cost nothing.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, str], _SessionLock] = {}

    @contextmanager
    def hold(self, plugin_id: str, session_id: str) -> Iterator[None]:
        key = (plugin_id, session_id)
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = _SessionLock()
                self._locks[key] = entry
            entry.holders += 1

        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
