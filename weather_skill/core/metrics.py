"""Turn counters exposed on ``/metrics``."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field


@dataclass
class MetricSnapshot:
    total_turns: int
    entry_points: dict[str, int]
    response_sources: dict[str, int]
    handlers: dict[str, int] = field(default_factory=dict)
    apologies: int = 0


class MetricsCollector:
    """Count turns by entry point, response source and answering handler.

    The handler is the keyword handler or dialogue state the engine credited
    with the turn; turns with no handler name are only counted by source.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_turns = 0
        self._apologies = 0
        self._entry_points: Counter[str] = Counter()
        self._sources: Counter[str] = Counter()
        self._handlers: Counter[str] = Counter()

    def record_turn(self, entry_point: str, source: str, handler: str = "", *, apology: bool = False) -> None:
        with self._lock:
            self._total_turns += 1
            self._entry_points[entry_point] += 1
            self._sources[source] += 1
            if handler:
                self._handlers[f"{source}:{handler}"] += 1
            if apology:
                self._apologies += 1

    def snapshot(self) -> MetricSnapshot:
        with self._lock:
            return MetricSnapshot(
                total_turns=self._total_turns,
                entry_points=dict(self._entry_points),
                response_sources=dict(self._sources),
                handlers=dict(self._handlers),
                apologies=self._apologies,
            )
