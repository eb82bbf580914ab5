from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.contracts.v1.line_wire import (
    DEFAULT_TCP_HOST,
    DEFAULT_TCP_PORT,
    default_pipe_path,
)


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LSR_", extra="ignore")

    # choose transport impl
    transport: Literal["tcp", "pipe"] = "tcp"

    host: str = DEFAULT_TCP_HOST
    port: int = Field(default=DEFAULT_TCP_PORT, ge=1, le=65535)
    pipe_path: str = Field(default_factory=default_pipe_path)

    # per-operation read/write deadline, and the separate connect deadline
    timeout_s: float = Field(default=2.0, gt=0)
    connect_timeout_s: float = Field(default=2.0, gt=0)

    # reconnect and retry a failed read once (see DESIGN.md)
    retry_reads: bool = True
