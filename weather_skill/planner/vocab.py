"""Keyword router trying registered handlers before any dialogue runs."""

from __future__ import annotations

import logging
from typing import Sequence

from weather_skill.planner.types import KeywordHandler, TurnContext

logger = logging.getLogger("weather.router")


class IntentRouter:
    """Dispatch a turn to the first keyword handler that produces an answer.

    Handlers are fixed at construction. A handler whose trigger matches but
    which returns an empty string is treated as "not enough data" and the
    next handler gets its chance. An empty result from the router tells the
    caller to fall through to the state machine.
    """

    def __init__(self, handlers: Sequence[KeywordHandler]) -> None:
        self._handlers = tuple(handlers)

    def handle_keywords(self, ctx: TurnContext) -> str:
        response, _ = self.dispatch(ctx)
        return response

    def dispatch(self, ctx: TurnContext) -> tuple[str, str]:
        """Return the answer and the name of the handler that gave it."""

        for handler in self._handlers:
            if not handler.trigger.matches(ctx.message):
                continue
            name = handler.name or handler.fn.__name__
            logger.debug("Trigger matched for handler %s", name)
            response = handler.fn(ctx)
            if response:
                return response, name
        return "", ""
