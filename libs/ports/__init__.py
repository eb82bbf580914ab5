from .time import SleeperPort
from .transport import LineTransportPort, TransportState

__all__ = [
    "LineTransportPort",
    "TransportState",
    "SleeperPort",
]
