from .factory import transport_from_settings
from .fakes import FakeLineTransport
from .pipe import PipeLineTransport, WindowsPipeStream
from .stream import Stream, StreamLineTransport
from .tcp import TcpLineTransport

__all__ = [
    "Stream",
    "StreamLineTransport",
    "TcpLineTransport",
    "PipeLineTransport",
    "WindowsPipeStream",
    "FakeLineTransport",
    "transport_from_settings",
]
