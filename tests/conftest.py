from __future__ import annotations

import os
import socket
import sys
import threading
import time
from collections.abc import Iterator
from pathlib import Path

import pytest

DEFAULT_RESPONSES: dict[str, str] = {
    "getcurrenttimerphase": "Running",
    "getsplitindex": "3",
    "getcurrenttime": "01:02.50",
    "getlastsplittime": "58.25",
    "getcomparisonsplittime": "01:00",
    "getbestpossibletime": "24:31.07",
    "getfinaltime": "25:00",
    "getpredictedtime": "25:10.50",
    "getcurrentsplitname": "Dark World",
    "getprevioussplitname": "Eastern Palace",
    "getdelta": "-1.20",
}


class LineServer:
    """Threaded CRLF line server standing in for LiveSplit Server.

    Records every request line and answers verbs found in ``responses``;
    unknown verbs get no answer at all.
    """

    def __init__(
        self,
        family: int = socket.AF_INET,
        address: str | tuple[str, int] = ("127.0.0.1", 0),
    ) -> None:
        self.responses: dict[str, str] = dict(DEFAULT_RESPONSES)
        self.lines: list[str] = []
        self.raw = bytearray()
        self.connections = 0
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []
        self._conns: list[socket.socket] = []
        self._listener = socket.socket(family, socket.SOCK_STREAM)
        if family == socket.AF_INET:
            self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(address)
        self._listener.listen(8)
        self._listener.settimeout(0.05)
        self.address = self._listener.getsockname()

    @property
    def port(self) -> int:
        return int(self.address[1])

    def start(self) -> LineServer:
        t = threading.Thread(target=self._accept_loop, name="line-server", daemon=True)
        t.start()
        self._threads.append(t)
        return self

    def stop(self) -> None:
        self._stop.set()
        self._listener.close()
        # accept loop first, so no handler thread is added after the snapshot
        self._threads[0].join(timeout=1.0)
        for t in self._threads[1:]:
            t.join(timeout=1.0)

    def drop_connections(self) -> None:
        """Hang up on every live client, as a restarting timer would."""
        with self._lock:
            conns, self._conns = self._conns, []
        for conn in conns:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
        # handlers see EOF and close their end
        for t in self._threads[1:]:
            t.join(timeout=1.0)

    def wait_for_lines(self, count: int, timeout: float = 2.0) -> list[str]:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            with self._lock:
                if len(self.lines) >= count:
                    return list(self.lines)
            time.sleep(0.005)
        with self._lock:
            return list(self.lines)

    def _accept_loop(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._listener.accept()
            except TimeoutError:
                continue
            except OSError:
                return
            with self._lock:
                self.connections += 1
                self._conns.append(conn)
            t = threading.Thread(target=self._serve, args=(conn,), daemon=True)
            t.start()
            self._threads.append(t)

    def _serve(self, conn: socket.socket) -> None:
        conn.settimeout(0.05)
        pending = b""
        with conn:
            while not self._stop.is_set():
                try:
                    chunk = conn.recv(4096)
                except TimeoutError:
                    continue
                except OSError:
                    return
                if not chunk:
                    return
                with self._lock:
                    self.raw += chunk
                pending += chunk
                while b"\r\n" in pending:
                    line, pending = pending.split(b"\r\n", 1)
                    text = line.decode("utf-8")
                    with self._lock:
                        self.lines.append(text)
                    reply = self.responses.get(text.split(" ", 1)[0])
                    if reply is not None:
                        conn.sendall(reply.encode("utf-8") + b"\r\n")


@pytest.fixture
def line_server() -> Iterator[LineServer]:
    server = LineServer().start()
    try:
        yield server
    finally:
        server.stop()


@pytest.fixture
def unix_line_server(tmp_path: Path) -> Iterator[LineServer]:
    if sys.platform == "win32" or not hasattr(socket, "AF_UNIX"):
        pytest.skip("AF_UNIX sockets not available")
    server = LineServer(family=socket.AF_UNIX, address=str(tmp_path / "timer.sock")).start()
    try:
        yield server
    finally:
        server.stop()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the settings loader at an empty profiles dir and clear LSR_* env."""
    for key in list(os.environ):
        if key.startswith("LSR_"):
            monkeypatch.delenv(key, raising=False)
    profiles = tmp_path / "profiles"
    profiles.mkdir()
    monkeypatch.setenv("LSR_CONFIG_DIR", str(profiles))
    return profiles
