"""
Composition helpers for giving objects emitter behaviour.

Purpose
-------
Classes that want to emit events own a fully assembled emitter (base
emitter, holder, holding layer and validation) and forward to it, instead
of having emitter methods grafted onto them.

Responsibilities
----------------
- `create_event_emitter`: assemble the standard validating holding emitter
- `EventEmitterHost`: base class whose instances lazily own such an
  emitter, with event types declared per class and extendable later

Examples
--------
>>> class Truck(EventEmitterHost):
...     EVENT_TYPES = ("honk",)
>>> tonka = Truck()
>>> subscription = tonka.add_listener("honk", print)
>>> tonka.emit("honk", "beep")
beep
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, ClassVar, Optional

from retroemit.core.event.emitter import EventEmitter
from retroemit.core.event.holder import EventHolder
from retroemit.core.event.holding import HoldingEventEmitter
from retroemit.core.event.subscription import Subscription
from retroemit.core.event.types import ListenerType
from retroemit.core.event.validation import ValidatingEventEmitter


def create_event_emitter(
    event_types: Iterable[str],
    holder: Optional[EventHolder] = None,
    *,
    emitter: Optional[EventEmitter] = None,
) -> ValidatingEventEmitter:
    """
    Build a validating, holding emitter for the given event types.

    Parameters
    ----------
    event_types:
        Declared event types; emitting anything else raises.
    holder:
        Optional holder to share with other emitters. A new one is created
        if None.
    emitter:
        Optional base emitter. A new one is created if None.
    """
    holding = HoldingEventEmitter(emitter or EventEmitter(), holder or EventHolder())
    return ValidatingEventEmitter(holding, event_types)


class EventEmitterHost:
    """
    Mix-in style base class backed by composition.

    Subclasses declare `EVENT_TYPES`; a subclass's own declarations are
    added to those of its bases. Each instance creates its emitter on
    first use, so subclasses need not call ``super().__init__()``.
    """

    EVENT_TYPES: ClassVar[tuple[str, ...]] = ()

    _event_emitter: Optional[ValidatingEventEmitter] = None

    @classmethod
    def declared_event_types(cls) -> tuple[str, ...]:
        """Event types declared by this class and its bases, bases first."""
        declared: list[str] = []
        for klass in reversed(cls.__mro__):
            for event_type in klass.__dict__.get("EVENT_TYPES", ()):
                if event_type not in declared:
                    declared.append(event_type)
        return tuple(declared)

    @classmethod
    def extend_event_types(cls, event_types: Iterable[str]) -> None:
        """
        Declare more event types on this class.

        Existing instances of the class and its subclasses accept the new
        types from their next emission on.
        """
        own = tuple(cls.__dict__.get("EVENT_TYPES", ()))
        cls.EVENT_TYPES = own + tuple(t for t in event_types if t not in own)

    @property
    def event_emitter(self) -> ValidatingEventEmitter:
        if self._event_emitter is None:
            self._event_emitter = create_event_emitter(type(self).declared_event_types())
        else:
            self._event_emitter.extend_event_types(type(self).declared_event_types())
        return self._event_emitter

    def add_listener(
        self,
        event_type: str,
        listener: ListenerType,
        context: Optional[Any] = None,
    ) -> Subscription:
        return self.event_emitter.add_listener(event_type, listener, context)

    def once(
        self,
        event_type: str,
        listener: ListenerType,
        context: Optional[Any] = None,
    ) -> Subscription:
        return self.event_emitter.once(event_type, listener, context)

    def add_retroactive_listener(
        self,
        event_type: str,
        listener: ListenerType,
        context: Optional[Any] = None,
    ) -> Subscription:
        return self.event_emitter.add_retroactive_listener(event_type, listener, context)

    def remove_all_listeners(self, event_type: Optional[str] = None) -> None:
        self.event_emitter.remove_all_listeners(event_type)

    def remove_current_listener(self) -> None:
        self.event_emitter.remove_current_listener()

    def listeners(self, event_type: str) -> list[ListenerType]:
        return self.event_emitter.listeners(event_type)

    def emit(self, event_type: str, *args: Any) -> None:
        self.event_emitter.emit(event_type, *args)

    def emit_and_hold(self, event_type: str, *args: Any) -> None:
        self.event_emitter.emit_and_hold(event_type, *args)

    def release_current_event(self) -> None:
        self.event_emitter.release_current_event()

    def release_held_event_type(self, event_type: str) -> None:
        self.event_emitter.release_held_event_type(event_type)
