"""CRLF line framing shared by every transport.

A request is the space-joined command tokens followed by ``\\r\\n``. A
response is whatever the server writes up to the next ``\\n``; the trailing
``\\r\\n`` is stripped before decoding.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Final

LINE_TERMINATOR: Final = b"\r\n"
LINE_END: Final = b"\n"
WIRE_ENCODING: Final = "utf-8"

DEFAULT_TCP_HOST: Final = "127.0.0.1"
DEFAULT_TCP_PORT: Final = 16834
WINDOWS_PIPE_PATH: Final = r"\\.\pipe\LiveSplit"
POSIX_PIPE_PATH: Final = "/tmp/LiveSplit.sock"


def default_pipe_path() -> str:
    return WINDOWS_PIPE_PATH if sys.platform == "win32" else POSIX_PIPE_PATH


def encode_line(tokens: Sequence[str]) -> bytes:
    """Join tokens with single spaces and append CRLF."""
    if not tokens:
        raise ValueError("a command needs at least one token")
    return " ".join(tokens).encode(WIRE_ENCODING) + LINE_TERMINATOR


def decode_line(raw: bytes) -> str:
    """Decode one received line, dropping its ``\\r\\n`` (or bare ``\\n``)."""
    text = raw.decode(WIRE_ENCODING, errors="replace")
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text
