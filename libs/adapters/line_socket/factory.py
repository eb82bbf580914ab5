from __future__ import annotations

from shared.config.settings import ClientSettings

from .pipe import PipeLineTransport
from .stream import StreamLineTransport
from .tcp import TcpLineTransport


def transport_from_settings(settings: ClientSettings) -> StreamLineTransport:
    common = {
        "timeout_s": settings.timeout_s,
        "connect_timeout_s": settings.connect_timeout_s,
        "retry_reads": settings.retry_reads,
    }
    if settings.transport == "pipe":
        return PipeLineTransport(settings.pipe_path, **common)
    if settings.transport == "tcp":
        return TcpLineTransport(settings.host, settings.port, **common)
    raise ValueError(f"Unknown transport: {settings.transport}")
