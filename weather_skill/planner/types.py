"""Planner-related data structures shared by the router and the state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, MutableMapping

from weather_skill.memory.models import Message
from weather_skill.memory.store import MemoryStore


@dataclass(frozen=True, slots=True)
class Trigger:
    """Command and object word sets a message must both hit to match."""

    commands: frozenset[str]
    objects: frozenset[str]

    @classmethod
    def of(cls, commands: Iterable[str], objects: Iterable[str]) -> "Trigger":
        return cls(
            commands=frozenset(word.lower() for word in commands),
            objects=frozenset(word.lower() for word in objects),
        )

    def matches(self, message: Message) -> bool:
        tokens = message.token_set
        return bool(tokens & self.commands) and bool(tokens & self.objects)

    def to_dict(self) -> dict[str, list[str]]:
        return {"commands": sorted(self.commands), "objects": sorted(self.objects)}


@dataclass(slots=True)
class TurnContext:
    """Everything a handler or dialogue state may touch during one turn.

    Memory access goes through the context so callers never juggle plugin and
    session identifiers themselves. ``scratch`` holds values computed once per
    turn (for example extracted cities).
    """

    plugin_id: str
    message: Message
    memory: MemoryStore
    scratch: MutableMapping[str, Any] = field(default_factory=dict)

    @property
    def session_id(self) -> str:
        return self.message.session_id

    def remember(self, key: str, value: Any) -> None:
        self.memory.set(self.plugin_id, self.session_id, key, value)

    def recall(self, key: str) -> tuple[str | None, bool]:
        return self.memory.get(self.plugin_id, self.session_id, key)

    def has_memory(self, key: str) -> bool:
        return self.memory.has(self.plugin_id, self.session_id, key)


KeywordFn = Callable[[TurnContext], str]


@dataclass(frozen=True, slots=True)
class KeywordHandler:
    """Handler invoked by the router when its trigger matches."""

    trigger: Trigger
    fn: KeywordFn
    name: str = ""


def _no_input(ctx: TurnContext) -> None:
    return None


@dataclass(frozen=True, slots=True)
class DialogueState:
    """One step of a slot-filling flow.

    ``is_complete`` returns ``(done, override)``; a non-empty override is sent
    to the user as-is and the cursor stays put.
    """

    name: str
    on_entry: Callable[[TurnContext], str]
    is_complete: Callable[[TurnContext], tuple[bool, str]]
    on_input: Callable[[TurnContext], None] = _no_input
    skip_if_complete: bool = False
