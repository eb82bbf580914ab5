"""Blocking command dispatcher for the timer server.

Every public call is one locked round trip: send, optionally receive and
decode, then fire the matching ``TimerEvent``. The lock is per client; pass
the same ``lock`` to several clients to serialize them against each other.
It is re-entrant so a handler may call back into the client.
"""

from __future__ import annotations

import logging
import re
import threading
from contextlib import AbstractContextManager
from datetime import timedelta
from typing import Any, Final

from ports.transport import LineTransportPort
from shared.contracts.v1.commands import CommandName, TimerCommand
from shared.errors import ProtocolError

from .duration import format_duration, parse_duration
from .events import CallbackRegistry, Handler, TimerEvent
from .phase import TimerPhase, parse_phase

LOG: Final = logging.getLogger(__name__)

_CLOSE_TOKENS: Final = ("close",)
_INTEGER: Final = re.compile(r"-?[0-9]+")


class TimerClient:
    def __init__(
        self,
        transport: LineTransportPort,
        *,
        lock: AbstractContextManager[Any] | None = None,
        callbacks: CallbackRegistry | None = None,
    ) -> None:
        self.transport: Final = transport
        self.callbacks: Final = callbacks if callbacks is not None else CallbackRegistry()
        self._lock = lock if lock is not None else threading.RLock()

    def __enter__(self) -> TimerClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --------- plumbing ---------

    def _execute(self, command: TimerCommand, event: TimerEvent) -> None:
        if command.is_query:
            raise ValueError(f"{command.name.value} expects a response; send it as a query")
        tokens = command.tokens()
        with self._lock:
            self.transport.send(tokens)
            self.callbacks.fire(event, tokens)

    def _round_trip(self, command: TimerCommand) -> str:
        # caller holds self._lock
        if not command.is_query:
            raise ValueError(f"{command.name.value} gets no response; send it as a command")
        self.transport.send(command.tokens())
        return self.transport.recv()

    def _query(self, command: TimerCommand) -> str:
        with self._lock:
            return self._round_trip(command)

    def _query_duration(self, command: TimerCommand) -> timedelta:
        with self._lock:
            return parse_duration(self._round_trip(command))

    def _query_int(self, command: TimerCommand) -> int:
        with self._lock:
            text = self._round_trip(command).strip()
            if not _INTEGER.fullmatch(text):
                raise ProtocolError(f"{command.name.value}: expected an integer, got {text!r}")
            return int(text)

    # --------- control ---------

    def start_timer(self) -> None:
        self._execute(TimerCommand(name=CommandName.START_TIMER), TimerEvent.START)

    def start_or_split(self) -> None:
        """Start the timer or split, depending on the server's state.

        The phase is sampled in its own round trip before the command is
        sent, so it may be stale by the time the server acts on it.
        """
        phase = self.get_current_timer_phase()
        LOG.debug("start_or_split sampled phase %r", phase)
        command = TimerCommand(name=CommandName.START_OR_SPLIT)
        # TODO: confirm whether Running should fire SPLIT; kept as observed from the server.
        event = TimerEvent.START if phase == TimerPhase.RUNNING else TimerEvent.SPLIT
        self._execute(command, event)

    def split(self) -> None:
        self._execute(TimerCommand(name=CommandName.SPLIT), TimerEvent.SPLIT)

    def unsplit(self) -> None:
        self._execute(TimerCommand(name=CommandName.UNSPLIT), TimerEvent.UNSPLIT)

    def skip_split(self) -> None:
        self._execute(TimerCommand(name=CommandName.SKIP_SPLIT), TimerEvent.SKIP_SPLIT)

    def pause(self) -> None:
        self._execute(TimerCommand(name=CommandName.PAUSE), TimerEvent.PAUSE)

    def resume(self) -> None:
        self._execute(TimerCommand(name=CommandName.RESUME), TimerEvent.RESUME)

    def reset(self) -> None:
        self._execute(TimerCommand(name=CommandName.RESET), TimerEvent.RESET)

    def init_game_time(self) -> None:
        self._execute(TimerCommand(name=CommandName.INIT_GAME_TIME), TimerEvent.INIT_GAME_TIME)

    def set_game_time(self, value: timedelta) -> None:
        command = TimerCommand(name=CommandName.SET_GAME_TIME, args=(format_duration(value),))
        self._execute(command, TimerEvent.SET_GAME_TIME)

    def set_loading_times(self, value: timedelta) -> None:
        command = TimerCommand(name=CommandName.SET_LOADING_TIMES, args=(format_duration(value),))
        self._execute(command, TimerEvent.SET_LOADING_TIMES)

    def pause_game_time(self) -> None:
        self._execute(TimerCommand(name=CommandName.PAUSE_GAME_TIME), TimerEvent.PAUSE_GAME_TIME)

    def unpause_game_time(self) -> None:
        self._execute(
            TimerCommand(name=CommandName.UNPAUSE_GAME_TIME), TimerEvent.UNPAUSE_GAME_TIME
        )

    def set_comparison(self, comparison: str) -> None:
        command = TimerCommand(name=CommandName.SET_COMPARISON, args=(comparison,))
        self._execute(command, TimerEvent.SET_COMPARISON)

    # --------- queries ---------

    def get_delta(self, comparison: str | None = None) -> str:
        return self._query(TimerCommand(name=CommandName.GET_DELTA, args=(comparison or "",)))

    def get_last_split_time(self) -> timedelta:
        return self._query_duration(TimerCommand(name=CommandName.GET_LAST_SPLIT_TIME))

    def get_comparison_split_time(self) -> timedelta:
        return self._query_duration(TimerCommand(name=CommandName.GET_COMPARISON_SPLIT_TIME))

    def get_current_time(self) -> timedelta:
        return self._query_duration(TimerCommand(name=CommandName.GET_CURRENT_TIME))

    # The comparison is forwarded as a second token when given (empty means the
    # timer's current comparison). The predicted-time verb is "getpredictedtime";
    # older clients sent "getpredicatedtime", which the server does not know.
    def get_final_time(self, comparison: str | None = None) -> timedelta:
        command = TimerCommand(name=CommandName.GET_FINAL_TIME, args=(comparison or "",))
        return self._query_duration(command)

    def get_predicted_time(self, comparison: str | None = None) -> timedelta:
        command = TimerCommand(name=CommandName.GET_PREDICTED_TIME, args=(comparison or "",))
        return self._query_duration(command)

    def get_best_possible_time(self) -> timedelta:
        return self._query_duration(TimerCommand(name=CommandName.GET_BEST_POSSIBLE_TIME))

    def get_split_index(self) -> int:
        return self._query_int(TimerCommand(name=CommandName.GET_SPLIT_INDEX))

    def get_current_split_name(self) -> str:
        return self._query(TimerCommand(name=CommandName.GET_CURRENT_SPLIT_NAME))

    def get_previous_split_name(self) -> str:
        return self._query(TimerCommand(name=CommandName.GET_PREVIOUS_SPLIT_NAME))

    def get_current_timer_phase(self) -> TimerPhase | str:
        return parse_phase(self._query(TimerCommand(name=CommandName.GET_CURRENT_TIMER_PHASE)))

    # --------- lifecycle ---------

    def close(self) -> None:
        with self._lock:
            self.transport.close()
            self.callbacks.fire(TimerEvent.CLOSE, _CLOSE_TOKENS)

    # --------- subscriptions ---------

    def on(self, event: TimerEvent | str, handler: Handler) -> Handler:
        return self.callbacks.on(event, handler)

    def on_start(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.START, handler)

    def on_split(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.SPLIT, handler)

    def on_unsplit(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.UNSPLIT, handler)

    def on_skip_split(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.SKIP_SPLIT, handler)

    def on_pause(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.PAUSE, handler)

    def on_resume(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.RESUME, handler)

    def on_reset(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.RESET, handler)

    def on_init_game_time(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.INIT_GAME_TIME, handler)

    def on_set_game_time(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.SET_GAME_TIME, handler)

    def on_set_loading_times(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.SET_LOADING_TIMES, handler)

    def on_pause_game_time(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.PAUSE_GAME_TIME, handler)

    def on_unpause_game_time(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.UNPAUSE_GAME_TIME, handler)

    def on_set_comparison(self, handler: Handler) -> Handler:
        return self.on(TimerEvent.SET_COMPARISON, handler)

    def on_close(self, handler: Handler) -> Handler:
        """Subscribe to CLOSE, which fires on every ``close()`` call, including
        repeat calls on an already closed transport."""
        return self.on(TimerEvent.CLOSE, handler)
