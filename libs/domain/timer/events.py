from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import Final

from shared.errors import CallbackError

LOG: Final = logging.getLogger(__name__)

Handler = Callable[[tuple[str, ...]], None]


class TimerEvent(StrEnum):
    """Fired after the matching command completed its round trip."""

    START = "start"
    SPLIT = "split"
    UNSPLIT = "unsplit"
    SKIP_SPLIT = "skip_split"
    PAUSE = "pause"
    RESUME = "resume"
    RESET = "reset"
    INIT_GAME_TIME = "init_game_time"
    SET_GAME_TIME = "set_game_time"
    SET_LOADING_TIMES = "set_loading_times"
    PAUSE_GAME_TIME = "pause_game_time"
    UNPAUSE_GAME_TIME = "unpause_game_time"
    SET_COMPARISON = "set_comparison"
    CLOSE = "close"


class CallbackRegistry:
    """Event tag -> handlers, in registration order. Handlers cannot be removed."""

    def __init__(self) -> None:
        self._handlers: dict[TimerEvent, list[Handler]] = {event: [] for event in TimerEvent}
        self._guard = threading.Lock()

    def on(self, event: TimerEvent | str, handler: Handler) -> Handler:
        event = TimerEvent(event)
        with self._guard:
            self._handlers[event].append(handler)
        return handler

    def handlers(self, event: TimerEvent | str) -> tuple[Handler, ...]:
        with self._guard:
            return tuple(self._handlers[TimerEvent(event)])

    def fire(self, event: TimerEvent | str, tokens: Sequence[str]) -> list[CallbackError]:
        """Call every handler for ``event``; failures are logged and returned, never raised."""
        event = TimerEvent(event)
        payload = tuple(tokens)
        failures: list[CallbackError] = []
        for handler in self.handlers(event):
            try:
                handler(payload)
            except Exception as exc:
                err = CallbackError(event.value, handler, exc)
                LOG.exception("%s", err)
                failures.append(err)
        return failures
