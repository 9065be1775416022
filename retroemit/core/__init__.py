"""
Core infrastructure layer for retroemit.

Purpose
-------
Single import surface for the core subsystems:

- Configuration (Config)
- Logging (structured logging, logger factory)
- Exceptions (RetroEmitException hierarchy)
- Event system (emitters, holder, composition helpers)

Non-Responsibilities
--------------------
- Any side effects beyond simple re-exports (logging is configured only
  when `setup_logging()` is called)
"""

from retroemit.core.config import Config
from retroemit.core.event import (
    EventEmitter,
    EventEmitterHost,
    EventHolder,
    HoldingEventEmitter,
    Subscription,
    ValidatingEventEmitter,
    create_event_emitter,
)
from retroemit.core.exceptions import (
    ErrorSeverity,
    InvariantViolation,
    RetroEmitException,
    UnknownEventTypeError,
)
from retroemit.core.logging import get_logger, setup_logging, shutdown_logging

__all__ = [
    # Config
    "Config",
    # Logging
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    # Exceptions
    "ErrorSeverity",
    "RetroEmitException",
    "InvariantViolation",
    "UnknownEventTypeError",
    # Events
    "EventEmitter",
    "EventHolder",
    "HoldingEventEmitter",
    "ValidatingEventEmitter",
    "EventEmitterHost",
    "create_event_emitter",
    "Subscription",
]
