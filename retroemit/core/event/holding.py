"""
retroemit HoldingEventEmitter: live emission plus retroactive delivery.

Purpose
-------
Pairs an EventEmitter with an EventHolder. Events emitted with
`emit_and_hold` reach live listeners immediately and are also retained;
listeners registered with `add_retroactive_listener` receive that backlog
first and every later emission afterwards.

Responsibilities
----------------
- Forward registration, removal and plain emission to the emitter
- Hold-and-emit, with the held record addressable as the current event
- Retroactive registration: subscribe live, then replay the backlog
- Route `remove_current_listener` / `release_current_event` to whichever
  delivery is innermost

Design Decisions
----------------
- **Supplied collaborators**: the emitter and the holder are passed in;
  their lifetimes belong to the caller and a holder may be shared.
- **Dispatch frames**: every delivery started here pushes a frame (live
  emit, hold-and-emit carrying its token, or replay carrying a removal
  flag). "Current" always means the innermost frame, so nested emits,
  holds and replays each see their own state.
- **Deferred removal**: during a replay the base emitter has no current
  subscription. `remove_current_listener` sets the replay frame's flag
  and the live subscription created by that same retroactive call is
  released once its replay is over.

Examples
--------
>>> holding = HoldingEventEmitter(EventEmitter(), EventHolder())
>>> holding.emit_and_hold("ready", "abc")
>>> holding.add_retroactive_listener("ready", print)
abc
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from retroemit.core.event.emitter import EventEmitter
from retroemit.core.event.holder import EventHolder
from retroemit.core.event.metrics import EventMetrics
from retroemit.core.event.subscription import Subscription
from retroemit.core.event.types import HeldEventToken, ListenerType
from retroemit.core.logging.logger import get_logger

logger = get_logger(__name__)


class DispatchKind(Enum):
    EMIT = "emit"
    HOLD = "hold"
    REPLAY = "replay"


@dataclass(slots=True)
class _DispatchFrame:
    kind: DispatchKind
    token: Optional[HeldEventToken] = None
    remove_requested: bool = False


class HoldingEventEmitter:
    """Emitter whose events can be held for listeners that arrive later."""

    def __init__(self, emitter: EventEmitter, holder: EventHolder) -> None:
        self._emitter = emitter
        self._holder = holder
        self._frames: list[_DispatchFrame] = []

    @property
    def emitter(self) -> EventEmitter:
        return self._emitter

    @property
    def holder(self) -> EventHolder:
        return self._holder

    # ------------------------------------------------------------------ #
    # Forwarded operations
    # ------------------------------------------------------------------ #

    def add_listener(
        self,
        event_type: str,
        listener: ListenerType,
        context: Optional[Any] = None,
    ) -> Subscription:
        return self._emitter.add_listener(event_type, listener, context)

    def once(
        self,
        event_type: str,
        listener: ListenerType,
        context: Optional[Any] = None,
    ) -> Subscription:
        return self._emitter.once(event_type, listener, context)

    def remove_all_listeners(self, event_type: Optional[str] = None) -> None:
        self._emitter.remove_all_listeners(event_type)

    def remove_subscription(self, subscription: Subscription) -> None:
        self._emitter.remove_subscription(subscription)

    def listeners(self, event_type: str) -> list[ListenerType]:
        return self._emitter.listeners(event_type)

    def listener_count(self, event_type: Optional[str] = None) -> int:
        return self._emitter.listener_count(event_type)

    def event_types(self) -> list[str]:
        return self._emitter.event_types()

    def get_metrics(self) -> Optional[EventMetrics]:
        return self._emitter.get_metrics()

    # ------------------------------------------------------------------ #
    # Emission
    # ------------------------------------------------------------------ #

    def emit(self, event_type: str, *args: Any) -> None:
        """Emit to live listeners only; nothing is retained."""
        self._frames.append(_DispatchFrame(DispatchKind.EMIT))
        try:
            self._emitter.emit(event_type, *args)
        finally:
            self._frames.pop()

    def emit_and_hold(self, event_type: str, *args: Any) -> None:
        """
        Hold the event, then emit it to live listeners.

        During the live emission `release_current_event()` releases exactly
        the record held by this call.
        """
        token = self._holder.hold_event(event_type, *args)
        self._frames.append(_DispatchFrame(DispatchKind.HOLD, token=token))
        try:
            self._emitter.emit(event_type, *args)
        finally:
            self._frames.pop()

    def add_retroactive_listener(
        self,
        event_type: str,
        listener: ListenerType,
        context: Optional[Any] = None,
    ) -> Subscription:
        """
        Subscribe `listener` to future events and replay held ones to it.

        The listener is registered live before the replay starts. If it
        calls `remove_current_listener()` while being replayed to, the live
        registration is released when this replay finishes.

        Returns
        -------
        Subscription:
            The live registration.
        """
        subscription = self._emitter.add_listener(event_type, listener, context)

        frame = _DispatchFrame(DispatchKind.REPLAY)
        self._frames.append(frame)
        try:
            self._holder.emit_to_listener(event_type, listener, context)
        finally:
            self._frames.pop()
            if frame.remove_requested:
                subscription.release()
                logger.debug(
                    "HoldingEventEmitter: removed retroactive listener after replay",
                    extra={"event_type": event_type, "listener_key": subscription.key},
                )

        return subscription

    # ------------------------------------------------------------------ #
    # Cancellation hooks
    # ------------------------------------------------------------------ #

    def remove_current_listener(self) -> None:
        """
        Remove the listener being invoked right now.

        Inside a replay the removal is deferred until that replay ends;
        otherwise the emitter removes it immediately (and raises if no
        emission is in progress).
        """
        if self._frames and self._frames[-1].kind is DispatchKind.REPLAY:
            self._frames[-1].remove_requested = True
            return
        self._emitter.remove_current_listener()

    def release_current_event(self) -> None:
        """
        Release the held record being delivered right now.

        The innermost hold-and-emit or replay decides which record that is.
        Does nothing when neither is in progress.
        """
        for frame in reversed(self._frames):
            if frame.kind is DispatchKind.HOLD:
                self._holder.release_event(frame.token)
                return
            if frame.kind is DispatchKind.REPLAY:
                self._holder.release_current_event()
                return

        logger.debug("HoldingEventEmitter: no current event to release")

    def release_held_event_type(self, event_type: str) -> None:
        self._holder.release_event_type(event_type)
