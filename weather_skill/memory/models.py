"""Dataclasses representing turns, cities and stored memory entries."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

_TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> tuple[str, ...]:
    """Lower-case the text and keep its alphanumeric runs, dropping punctuation."""

    return tuple(_TOKEN_PATTERN.findall(text.lower()))


@dataclass(frozen=True, slots=True)
class Message:
    """Single user turn addressed to the skill."""

    session_id: str
    raw_text: str
    tokens: tuple[str, ...] = ()

    @classmethod
    def from_text(cls, session_id: str, text: str) -> "Message":
        return cls(session_id=session_id, raw_text=text, tokens=tokenize(text))

    @property
    def token_set(self) -> frozenset[str]:
        return frozenset(self.tokens)


@dataclass(slots=True)
class City:
    """A resolved city; coordinates are optional."""

    name: str
    latitude: float | None = None
    longitude: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Any) -> "City":
        if not isinstance(payload, dict):
            raise TypeError(f"expected an object, got {type(payload).__name__}")
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("city name missing")
        return cls(
            name=name,
            latitude=_optional_float(payload.get("latitude")),
            longitude=_optional_float(payload.get("longitude")),
        )


@dataclass(slots=True)
class MemoryEntry:
    """Serialized slot value stored for a session."""

    session_id: str
    key: str
    value: str
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    return float(value)
