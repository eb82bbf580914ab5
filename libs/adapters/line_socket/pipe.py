from __future__ import annotations

import logging
import socket
import sys
import time
from collections.abc import Callable
from typing import BinaryIO, Final

from shared.contracts.v1.line_wire import default_pipe_path

from .stream import Stream, StreamLineTransport, socket_peer_closed

if sys.platform == "win32":
    import _winapi
    import msvcrt

LOG: Final = logging.getLogger(__name__)

_POLL_INTERVAL_S: Final = 0.005


class WindowsPipeStream:
    """A Windows named pipe opened as an unbuffered binary file.

    File handles have no timeouts of their own, so reads poll ``peek`` (bytes
    waiting in the pipe) until data arrives or the deadline passes. Writes
    are not bounded: a request line always fits in the pipe buffer.
    """

    def __init__(self, handle: BinaryIO, path: str, peek: Callable[[], int]) -> None:
        self._handle = handle
        self._path = path
        self._peek = peek
        self._timeout: float | None = None

    def settimeout(self, value: float | None) -> None:
        self._timeout = value

    def sendall(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = self._handle.write(view)
            if not written:
                raise BrokenPipeError(f"short write on {self._path}")
            view = view[written:]
        self._handle.flush()

    def recv(self, bufsize: int) -> bytes:
        if self._timeout is None:
            return self._handle.read(bufsize) or b""
        deadline = time.monotonic() + self._timeout
        while True:
            # raises BrokenPipeError once the server end is gone
            available = self._peek()
            if available:
                return self._handle.read(min(bufsize, available)) or b""
            if time.monotonic() >= deadline:
                raise TimeoutError(f"no data on {self._path} within {self._timeout:g}s")
            time.sleep(_POLL_INTERVAL_S)

    def peer_closed(self) -> bool:
        try:
            self._peek()
        except OSError:
            return True
        return False

    def close(self) -> None:
        self._handle.close()


def _open_windows_pipe(path: str) -> WindowsPipeStream:
    handle = open(path, "r+b", buffering=0)
    os_handle = msvcrt.get_osfhandle(handle.fileno())
    return WindowsPipeStream(handle, path, peek=lambda: _winapi.PeekNamedPipe(os_handle)[0])


class PipeLineTransport(StreamLineTransport):
    """LiveSplit Server over the platform-local pipe.

    On Windows this is ``\\\\.\\pipe\\LiveSplit``; elsewhere the same protocol
    runs over a Unix domain stream socket at ``path``.
    """

    def __init__(self, path: str | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.path = path or default_pipe_path()

    @property
    def endpoint(self) -> str:
        return f"pipe:{self.path}"

    def _peer_closed(self, stream: Stream) -> bool:
        if isinstance(stream, WindowsPipeStream):
            return stream.peer_closed()
        return socket_peer_closed(stream)  # type: ignore[arg-type]

    def _open(self) -> Stream:
        if sys.platform == "win32":
            return _open_windows_pipe(self.path)

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(self.connect_timeout_s)
            sock.connect(self.path)
        except OSError:
            sock.close()
            raise
        return sock
