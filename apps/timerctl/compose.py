from __future__ import annotations

import logging
from typing import Final

from adapters.line_socket import transport_from_settings
from domain.timer import TimerClient
from shared.config.settings import ClientSettings

LOG: Final = logging.getLogger("timerctl")


def build_client(settings: ClientSettings) -> TimerClient:
    transport = transport_from_settings(settings)
    LOG.debug("timerctl using %s (timeout %.2fs)", transport.endpoint, settings.timeout_s)
    return TimerClient(transport)
