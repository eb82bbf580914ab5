from .commands import QUERY_COMMANDS, CommandName, TimerCommand
from .line_wire import (
    DEFAULT_TCP_HOST,
    DEFAULT_TCP_PORT,
    LINE_TERMINATOR,
    POSIX_PIPE_PATH,
    WINDOWS_PIPE_PATH,
    decode_line,
    default_pipe_path,
    encode_line,
)

__all__ = [
    "CommandName",
    "TimerCommand",
    "QUERY_COMMANDS",
    "LINE_TERMINATOR",
    "DEFAULT_TCP_HOST",
    "DEFAULT_TCP_PORT",
    "WINDOWS_PIPE_PATH",
    "POSIX_PIPE_PATH",
    "encode_line",
    "decode_line",
    "default_pipe_path",
]
