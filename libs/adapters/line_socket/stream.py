"""Reconnecting CRLF line transport over any socket-like byte stream.

Retry policy, per call:

* before a write, a connection the peer has already hung up on is replaced,
  since writes into a dead socket usually still succeed locally;
* connect failures raise ``TimerConnectionError`` and are not retried;
* timeouts raise ``TimerTimeoutError`` at once, a command may already have
  reached the server and must not be sent twice;
* any other I/O error drops the connection, reconnects once and repeats the
  write (or, with ``retry_reads``, the read) once. If that also fails the
  first error is raised and the transport is left disconnected.
"""

from __future__ import annotations

import logging
import select
import socket
import time
from abc import abstractmethod
from collections.abc import Callable, Sequence
from typing import Final, Protocol, TypeVar

from ports.transport import LineTransportPort, TransportState
from shared.contracts.v1.line_wire import LINE_END, decode_line, encode_line
from shared.errors import (
    ProtocolError,
    TimerClientError,
    TimerConnectionError,
    TimerTimeoutError,
    TransientIOError,
)

LOG: Final = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S: Final = 2.0
DEFAULT_MAX_LINE_BYTES: Final = 64 * 1024
_RECV_CHUNK: Final = 4096

T = TypeVar("T")


class Stream(Protocol):
    """The subset of the socket API the transport relies on."""

    def settimeout(self, value: float | None) -> None: ...
    def sendall(self, data: bytes) -> None: ...
    def recv(self, bufsize: int) -> bytes: ...
    def close(self) -> None: ...


class StreamLineTransport(LineTransportPort):
    """Owns zero or one stream; subclasses only say how to open it."""

    def __init__(
        self,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        connect_timeout_s: float = DEFAULT_TIMEOUT_S,
        retry_reads: bool = True,
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    ) -> None:
        self.timeout_s = timeout_s
        self.connect_timeout_s = connect_timeout_s
        self.retry_reads = retry_reads
        self.max_line_bytes = max_line_bytes
        self._stream: Stream | None = None
        self._buffer = bytearray()

    @abstractmethod
    def _open(self) -> Stream:
        """Open a fresh stream to the endpoint. Raise OSError on failure."""

    def _peer_closed(self, stream: Stream) -> bool:
        """True if the peer hung up since the last call. Streams that cannot tell say no."""
        return False

    # --------- lifecycle ---------

    @property
    def state(self) -> TransportState:
        if self._stream is None:
            return TransportState.DISCONNECTED
        return TransportState.CONNECTED

    def ensure_connected(self) -> Stream:
        if self._stream is None:
            self._connect()
        assert self._stream is not None
        return self._stream

    def close(self) -> None:
        if self._stream is not None:
            LOG.info("Closing timer connection %s", self.endpoint)
        self._drop()

    def _connect(self) -> None:
        self._drop()
        LOG.info("Establishing timer connection %s", self.endpoint)
        try:
            stream = self._open()
        except OSError as exc:
            LOG.warning("Timer connection %s failed: %r", self.endpoint, exc)
            detail = "timed out" if isinstance(exc, TimeoutError) else str(exc) or repr(exc)
            raise TimerConnectionError(self.endpoint, detail) from exc
        self._stream = stream
        LOG.info("Timer connection %s established", self.endpoint)

    def _drop(self) -> None:
        stream, self._stream = self._stream, None
        self._buffer.clear()
        if stream is None:
            return
        try:
            stream.close()
        except OSError as exc:
            LOG.debug("Ignoring close error on %s: %r", self.endpoint, exc)

    # --------- send ---------

    def send(self, tokens: Sequence[str]) -> None:
        data = encode_line(tokens)
        if self._stream is not None and self._peer_closed(self._stream):
            LOG.info("Timer connection %s was closed by the peer; reconnecting", self.endpoint)
            self._drop()
        self.ensure_connected()
        try:
            self._write(data)
        except TransientIOError as first:
            LOG.warning("Write to %s failed (%s); reconnecting once", self.endpoint, first)
            try:
                self._connect()
                self._write(data)
            except TimerClientError as second:
                LOG.warning("Resend to %s failed: %s", self.endpoint, second)
                self._drop()
                raise first

    def _write(self, data: bytes) -> None:
        stream = self.ensure_connected()
        self._guarded("write", _send_all, stream, data, self.timeout_s)
        self._clear_deadline(stream)
        LOG.debug("TX %s: %r", self.endpoint, data)

    # --------- recv ---------

    def recv(self) -> str:
        self.ensure_connected()
        try:
            raw = self._read_line()
        except TransientIOError as first:
            if not self.retry_reads:
                raise
            LOG.warning("Read from %s failed (%s); reconnecting once", self.endpoint, first)
            try:
                self._connect()
                raw = self._read_line()
            except TimerClientError as second:
                LOG.warning("Re-read from %s failed: %s", self.endpoint, second)
                self._drop()
                raise first
        return decode_line(raw)

    def _read_line(self) -> bytes:
        stream = self.ensure_connected()
        deadline = time.monotonic() + self.timeout_s
        end = self._buffer.find(LINE_END)
        while end < 0:
            if len(self._buffer) > self.max_line_bytes:
                self._drop()
                raise ProtocolError(
                    f"response from {self.endpoint} exceeds {self.max_line_bytes} bytes"
                )
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self._drop()
                raise TimerTimeoutError(
                    f"read on {self.endpoint} timed out after {self.timeout_s:g}s"
                )
            chunk = self._guarded("read", _recv_chunk, stream, remaining)
            if not chunk:
                self._drop()
                raise TransientIOError(f"{self.endpoint} closed the connection")
            self._buffer += chunk
            end = self._buffer.find(LINE_END)

        raw = bytes(self._buffer[: end + 1])
        del self._buffer[: end + 1]
        self._clear_deadline(stream)
        LOG.debug("RX %s: %r", self.endpoint, raw)
        return raw

    # --------- helpers ---------

    def _guarded(self, action: str, fn: Callable[..., T], *args: object) -> T:
        """Run one stream call, mapping OS errors onto the client taxonomy."""
        try:
            return fn(*args)
        except TimeoutError as exc:
            self._drop()
            raise TimerTimeoutError(
                f"{action} on {self.endpoint} timed out after {self.timeout_s:g}s"
            ) from exc
        except OSError as exc:
            self._drop()
            raise TransientIOError(f"{action} on {self.endpoint} failed: {exc!r}") from exc

    def _clear_deadline(self, stream: Stream) -> None:
        try:
            stream.settimeout(None)
        except OSError as exc:
            LOG.debug("Unable to clear deadline on %s: %r", self.endpoint, exc)


def _send_all(stream: Stream, data: bytes, timeout: float) -> None:
    stream.settimeout(timeout)
    stream.sendall(data)


def _recv_chunk(stream: Stream, timeout: float) -> bytes:
    stream.settimeout(timeout)
    return stream.recv(_RECV_CHUNK)


def socket_peer_closed(sock: socket.socket) -> bool:
    """Non-blocking check for a pending EOF (or error) on a connected socket."""
    try:
        readable, _, _ = select.select([sock], [], [], 0)
        if not readable:
            return False
        return sock.recv(1, socket.MSG_PEEK) == b""
    except (OSError, ValueError):
        # ValueError: the socket was already closed locally (fileno -1)
        return True
