"""Slot-filling conversation state machine with a persisted cursor."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from weather_skill.planner.types import DialogueState, TurnContext

logger = logging.getLogger("weather.dialogue")


class ConversationStateMachine:
    """Walk an ordered list of dialogue states, one transition per turn.

    The cursor is stored in the memory store under the plugin and session of
    the turn, so the machine itself holds no per-session data and one instance
    serves every session. ``cursor == len(states)`` means the flow is done.
    """

    def __init__(
        self,
        plugin_id: str,
        states: Sequence[DialogueState],
        *,
        reset_keys: Sequence[str] = (),
        on_reset: Callable[[TurnContext], None] | None = None,
    ) -> None:
        if not states:
            raise ValueError("a state machine needs at least one state")
        self.plugin_id = plugin_id
        self._states = tuple(states)
        self._reset_keys = tuple(reset_keys)
        self._on_reset = on_reset

    def cursor(self, ctx: TurnContext) -> int:
        stored = ctx.memory.load_cursor(self.plugin_id, ctx.session_id)
        if stored is None:
            return 0
        return min(max(stored, 0), len(self._states))

    def current_state(self, ctx: TurnContext) -> DialogueState | None:
        cursor = self.cursor(ctx)
        return self._states[cursor] if cursor < len(self._states) else None

    def reset(self, ctx: TurnContext) -> None:
        """Rewind to the first state and clear the slots this skill owns."""

        ctx.memory.save_cursor(self.plugin_id, ctx.session_id, 0)
        for key in self._reset_keys:
            ctx.memory.clear(self.plugin_id, ctx.session_id, key)
        if self._on_reset is not None:
            self._on_reset(ctx)
        logger.debug("Reset dialogue for session %s", ctx.session_id)

    def next(self, ctx: TurnContext) -> str:
        cursor = self.cursor(ctx)
        if cursor >= len(self._states):
            return ""

        current = self._states[cursor]
        try:
            current.on_input(ctx)
        except Exception:  # noqa: BLE001
            logger.exception("on_input failed in state %s", current.name)

        done, override = current.is_complete(ctx)
        if override:
            return override
        if not done:
            return current.on_entry(ctx)

        while True:
            completed = self._states[cursor]
            cursor += 1
            ctx.memory.save_cursor(self.plugin_id, ctx.session_id, cursor)
            logger.debug("Session %s advanced to state %d", ctx.session_id, cursor)
            if cursor >= len(self._states):
                return ""
            upcoming = self._states[cursor]
            if completed.skip_if_complete and upcoming.is_complete(ctx)[0]:
                continue
            return upcoming.on_entry(ctx)
