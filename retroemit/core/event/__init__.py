"""
Event System for retroemit.

Purpose
-------
Synchronous in-process event multicast with event holding and
retroactive delivery:

- EventEmitter: registration and fan-out
- EventHolder: retained events with token-precise release
- HoldingEventEmitter: emit-and-hold plus retroactive listeners
- ValidatingEventEmitter: allow-listed event types with typo hints
- create_event_emitter / EventEmitterHost: ready-made composition
"""

from .composition import EventEmitterHost, create_event_emitter
from .emitter import EventEmitter
from .holder import EventHolder
from .holding import HoldingEventEmitter
from .metrics import EventMetrics, EventMetricsRecorder
from .subscription import Subscription
from .types import (
    EmitterProtocol,
    HeldEventToken,
    HoldingEmitterProtocol,
    ListenerRecord,
    ListenerType,
)
from .validation import (
    ValidatingEventEmitter,
    damerau_levenshtein_distance,
    suggest_event_type,
)

__all__ = [
    "EventEmitter",
    "EventHolder",
    "HoldingEventEmitter",
    "ValidatingEventEmitter",
    "EventEmitterHost",
    "create_event_emitter",
    "Subscription",
    "HeldEventToken",
    "ListenerRecord",
    "ListenerType",
    "EmitterProtocol",
    "HoldingEmitterProtocol",
    "EventMetrics",
    "EventMetricsRecorder",
    "damerau_levenshtein_distance",
    "suggest_event_type",
]
