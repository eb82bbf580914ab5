from .client import TimerClient
from .duration import format_duration, parse_duration
from .events import CallbackRegistry, Handler, TimerEvent
from .phase import TimerPhase, parse_phase

__all__ = [
    "TimerClient",
    "TimerPhase",
    "TimerEvent",
    "CallbackRegistry",
    "Handler",
    "format_duration",
    "parse_duration",
    "parse_phase",
]
