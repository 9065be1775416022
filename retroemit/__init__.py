"""retroemit: synchronous event emitters with event holding and retroactive listeners."""

from retroemit.core import (
    Config,
    ErrorSeverity,
    EventEmitter,
    EventEmitterHost,
    EventHolder,
    HoldingEventEmitter,
    InvariantViolation,
    RetroEmitException,
    Subscription,
    UnknownEventTypeError,
    ValidatingEventEmitter,
    create_event_emitter,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ErrorSeverity",
    "EventEmitter",
    "EventEmitterHost",
    "EventHolder",
    "HoldingEventEmitter",
    "InvariantViolation",
    "RetroEmitException",
    "Subscription",
    "UnknownEventTypeError",
    "ValidatingEventEmitter",
    "create_event_emitter",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
