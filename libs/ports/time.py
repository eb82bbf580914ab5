from __future__ import annotations

from abc import ABC, abstractmethod


class SleeperPort(ABC):
    @abstractmethod
    def sleep(self, seconds: float) -> None: ...
