"""Dialogue engine composing the keyword router and the state machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from weather_skill.core.locks import SessionLocks
from weather_skill.memory.models import Message
from weather_skill.memory.store import MemoryStore
from weather_skill.planner.state_machine import ConversationStateMachine
from weather_skill.planner.types import TurnContext
from weather_skill.planner.vocab import IntentRouter

logger = logging.getLogger("weather.engine")


class ResponseSource(str, Enum):
    """Which part of the engine produced a turn's response."""

    KEYWORD = "keyword"
    DIALOGUE = "dialogue"
    DEFERRED = "deferred"


@dataclass(slots=True)
class TurnResult:
    """Outcome of one turn."""

    response: str
    source: ResponseSource
    cursor: int
    handler: str = ""


class DialogueEngine:
    """Run one turn: keyword router first, state machine when it has nothing."""

    def __init__(
        self,
        plugin_id: str,
        router: IntentRouter,
        state_machine: ConversationStateMachine,
        memory: MemoryStore,
        locks: SessionLocks | None = None,
    ) -> None:
        self.plugin_id = plugin_id
        self.router = router
        self.state_machine = state_machine
        self.memory = memory
        self._locks = locks or SessionLocks()

    def _context(self, message: Message) -> TurnContext:
        return TurnContext(plugin_id=self.plugin_id, message=message, memory=self.memory)

    def run(self, message: Message) -> TurnResult:
        """Handle a fresh top-level command, discarding any earlier flow."""

        with self._locks.hold(self.plugin_id, message.session_id):
            ctx = self._context(message)
            self.state_machine.reset(ctx)
            return self._follow_up(ctx)

    def follow_up(self, message: Message) -> TurnResult:
        """Handle a continuation of an in-progress flow."""

        with self._locks.hold(self.plugin_id, message.session_id):
            return self._follow_up(self._context(message))

    def _follow_up(self, ctx: TurnContext) -> TurnResult:
        response, handler = self.router.dispatch(ctx)
        if response:
            source = ResponseSource.KEYWORD
        else:
            started = self.state_machine.current_state(ctx)
            response = self.state_machine.next(ctx)
            # Credit the state whose prompt went out, or the one just left when the flow ended.
            state = self.state_machine.current_state(ctx) or started
            handler = state.name if state is not None else ""
            source = ResponseSource.DIALOGUE if response else ResponseSource.DEFERRED

        cursor = self.state_machine.cursor(ctx)
        logger.debug(
            "Session %s answered by %s (%s) at cursor %d",
            ctx.session_id,
            source.value,
            handler or "-",
            cursor,
        )
        return TurnResult(response=response, source=source, cursor=cursor, handler=handler)
