"""
Core Event Types for retroemit.

Purpose
-------
Provides the fundamental type definitions shared by the emitter, the
holder and the holding emitter: listener callables, stored listener
records, held-event tokens, and the structural protocol that lets callers
be polymorphic over "anything that behaves like an emitter".

Design Decisions
----------------
- **Slots, frozen dataclasses**: records and tokens are immutable value
  objects; a slot is replaced with a tombstone, never edited in place.
- **Protocol, not base class**: `EmitterProtocol` is structural, so the
  base emitter, the holding emitter and the validating wrapper all satisfy
  it without sharing an ancestor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from retroemit.core.event.subscription import Subscription

# Listeners take the emitted positional arguments (preceded by the
# invocation context when one was registered).
ListenerType = Callable[..., Any]


@dataclass(slots=True, frozen=True)
class ListenerRecord:
    """
    One live registration held in an emitter slot.

    Attributes
    ----------
    callback:
        The registered callable.
    context:
        Optional invocation context passed as the first positional argument.
    """

    callback: ListenerType
    context: Optional[Any] = None

    def invoke(self, args: tuple[Any, ...]) -> Any:
        return invoke_listener(self.callback, self.context, args)


@dataclass(slots=True, frozen=True)
class HeldEventToken:
    """
    Opaque handle identifying one retained event record.

    Keys are never reused by a holder, so a token keeps pointing at its own
    record even after other records (or the whole type) were released.
    """

    event_type: str
    key: int


def invoke_listener(
    listener: ListenerType, context: Optional[Any], args: tuple[Any, ...]
) -> Any:
    """Call `listener` with `args`, prefixed by `context` when one is set."""
    if context is None:
        return listener(*args)
    return listener(context, *args)


@runtime_checkable
class EmitterProtocol(Protocol):
    """Operations every emitter in this package provides."""

    def add_listener(
        self, event_type: str, listener: ListenerType, context: Optional[Any] = None
    ) -> "Subscription": ...

    def once(
        self, event_type: str, listener: ListenerType, context: Optional[Any] = None
    ) -> "Subscription": ...

    def remove_all_listeners(self, event_type: Optional[str] = None) -> None: ...

    def emit(self, event_type: str, *args: Any) -> None: ...

    def listeners(self, event_type: str) -> list[ListenerType]: ...


@runtime_checkable
class HoldingEmitterProtocol(EmitterProtocol, Protocol):
    """Emitter that can also retain events for retroactive listeners."""

    def emit_and_hold(self, event_type: str, *args: Any) -> None: ...

    def add_retroactive_listener(
        self, event_type: str, listener: ListenerType, context: Optional[Any] = None
    ) -> "Subscription": ...

    def release_current_event(self) -> None: ...

    def release_held_event_type(self, event_type: str) -> None: ...
