from __future__ import annotations

import time

from ports.time import SleeperPort


class SystemSleeperPort(SleeperPort):
    def sleep(self, seconds: float) -> None:
        time.sleep(max(0.0, seconds))


class FakeSleeperPort(SleeperPort):
    """Records requested sleeps instead of blocking."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def sleep(self, seconds: float) -> None:
        self.calls.append(seconds)
