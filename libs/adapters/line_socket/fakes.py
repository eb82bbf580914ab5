from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence

from ports.transport import LineTransportPort, TransportState


class FakeLineTransport(LineTransportPort):
    """Records sent token tuples and replays canned response lines."""

    def __init__(self, responses: Iterable[str] = ()) -> None:
        self.sent: list[tuple[str, ...]] = []
        self.close_calls = 0
        self._responses: deque[str] = deque(responses)
        self._send_errors: deque[Exception] = deque()
        self._recv_errors: deque[Exception] = deque()
        self._connected = False

    @property
    def endpoint(self) -> str:
        return "fake://timer"

    @property
    def state(self) -> TransportState:
        return TransportState.CONNECTED if self._connected else TransportState.DISCONNECTED

    def send(self, tokens: Sequence[str]) -> None:
        if self._send_errors:
            self._connected = False
            raise self._send_errors.popleft()
        self._connected = True
        self.sent.append(tuple(tokens))

    def recv(self) -> str:
        if self._recv_errors:
            self._connected = False
            raise self._recv_errors.popleft()
        if not self._responses:
            raise AssertionError("FakeLineTransport.recv() called with no queued response")
        return self._responses.popleft()

    def close(self) -> None:
        self.close_calls += 1
        self._connected = False

    # Test/helper API
    def queue_response(self, *lines: str) -> None:
        self._responses.extend(lines)

    def fail_next_send(self, exc: Exception) -> None:
        self._send_errors.append(exc)

    def fail_next_recv(self, exc: Exception) -> None:
        self._recv_errors.append(exc)

    @property
    def pending_responses(self) -> int:
        return len(self._responses)
