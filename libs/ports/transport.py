from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum


class TransportState(str, Enum):
    """Connection state machine."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class LineTransportPort(ABC):
    """Client -> timer server, one CRLF line per request, one line per answer.

    Implementations own at most one live connection and reconnect lazily.
    They are not thread-safe on their own; callers serialize access.
    """

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Human-readable address (``tcp://host:port`` or a pipe path)."""

    @property
    @abstractmethod
    def state(self) -> TransportState: ...

    @abstractmethod
    def send(self, tokens: Sequence[str]) -> None:
        """Write one request line built from ``tokens``."""

    @abstractmethod
    def recv(self) -> str:
        """Read one response line with its trailing CRLF removed."""

    @abstractmethod
    def close(self) -> None:
        """Release the connection. Safe to call repeatedly."""


__all__ = ["LineTransportPort", "TransportState"]
