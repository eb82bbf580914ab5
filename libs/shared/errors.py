"""Exception taxonomy for the timer client.

Each class also derives from the closest builtin so callers that already
catch ``ConnectionError``, ``TimeoutError``, ``OSError`` or ``ValueError``
keep working.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class TimerClientError(Exception):
    """Root of every error raised by this package."""


class TimerConnectionError(TimerClientError, ConnectionError):
    """The endpoint could not be reached (socket/pipe open failed)."""

    def __init__(self, endpoint: str, detail: str) -> None:
        super().__init__(f"cannot connect to {endpoint}: {detail}")
        self.endpoint = endpoint


class TimerTimeoutError(TimerClientError, TimeoutError):
    """A read or write exceeded its deadline. Never retried."""


class TransientIOError(TimerClientError, OSError):
    """A read or write failed for a reason other than a timeout."""


class ProtocolError(TimerClientError, ValueError):
    """Response text does not match the expected grammar."""


class DurationParseError(ProtocolError):
    def __init__(self, text: str, detail: str = "not a duration") -> None:
        super().__init__(f"{detail}: {text!r}")
        self.text = text


class CallbackError(TimerClientError):
    """A registered handler raised. Logged and collected, never propagated."""

    def __init__(self, event: str, handler: Callable[..., Any], cause: BaseException) -> None:
        name = getattr(handler, "__qualname__", repr(handler))
        super().__init__(f"handler {name} for {event!r} failed: {cause!r}")
        self.event = event
        self.handler = handler
        self.__cause__ = cause


__all__ = [
    "TimerClientError",
    "TimerConnectionError",
    "TimerTimeoutError",
    "TransientIOError",
    "ProtocolError",
    "DurationParseError",
    "CallbackError",
]
