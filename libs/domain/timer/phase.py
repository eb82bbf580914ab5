from __future__ import annotations

import logging
from enum import StrEnum
from typing import Final

LOG: Final = logging.getLogger(__name__)


class TimerPhase(StrEnum):
    NOT_RUNNING = "NotRunning"
    RUNNING = "Running"
    PAUSED = "Paused"
    ENDED = "Ended"


def parse_phase(text: str) -> TimerPhase | str:
    """Map a response onto ``TimerPhase``; unknown values pass through unchanged."""
    try:
        return TimerPhase(text)
    except ValueError:
        LOG.warning("Unrecognised timer phase %r", text)
        return text
