from __future__ import annotations

import socket

from shared.contracts.v1.line_wire import DEFAULT_TCP_HOST, DEFAULT_TCP_PORT

from .stream import Stream, StreamLineTransport, socket_peer_closed


class TcpLineTransport(StreamLineTransport):
    """LiveSplit Server over a loopback TCP port."""

    def __init__(
        self,
        host: str = DEFAULT_TCP_HOST,
        port: int = DEFAULT_TCP_PORT,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.host = host
        self.port = int(port)

    @property
    def endpoint(self) -> str:
        return f"tcp://{self.host}:{self.port}"

    def _peer_closed(self, stream: Stream) -> bool:
        return socket_peer_closed(stream)  # type: ignore[arg-type]

    def _open(self) -> Stream:
        sock = socket.create_connection((self.host, self.port), timeout=self.connect_timeout_s)
        try:
            # requests are tiny; don't let Nagle hold them back
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError:
            sock.close()
            raise
        return sock
