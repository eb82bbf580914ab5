from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from shared.config.settings import ClientSettings


class TimerctlSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LSR_", extra="ignore")

    # demo loop
    split_interval_s: float = Field(default=2.0, gt=0)
    comparison: str = ""  # empty = whatever comparison the timer shows

    client: ClientSettings = Field(default_factory=ClientSettings)
