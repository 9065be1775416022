"""
retroemit EventEmitter: synchronous in-process multicast.

Purpose
-------
Manages the listeners registered per event type and fans each emitted
event out to them, synchronously and in registration order. Everything
else in the package (holding, validation, composition) is layered on top
of this class.

Responsibilities
----------------
- Register listeners (optionally with an invocation context) and vend a
  Subscription per registration
- Emit events to the listeners that were registered when `emit` started
- Let a running listener remove itself (`remove_current_listener`)
- Introspection and metrics

Design Decisions
----------------
- **Slot arena per type**: each type maps stable integer keys to a
  ListenerRecord or a tombstone (None). Removal tombstones, it never
  deletes, so a pass in progress keeps its keys valid.
- **Keys are never reused**: keys come from one counter per emitter, so a
  stale Subscription can never hit a later registration, not even after
  `remove_all_listeners`.
- **Snapshot on emit**: the keys present when `emit` starts are the only
  ones visited; registrations made during the pass wait for the next emit.
- **Cursor restore**: the current-subscription cursor is restored to its
  previous value when a pass ends, so an emit nested inside a listener
  does not clobber the outer listener's cursor.

Thread Safety
-------------
Not thread-safe. All calls, including reentrant ones from listeners, must
happen on the same thread.

Examples
--------
>>> emitter = EventEmitter()
>>> subscription = emitter.add_listener("click", lambda x: print(x))
>>> emitter.emit("click", 1)
1
>>> subscription.release()
"""

from __future__ import annotations

import itertools
from typing import Any, Optional

from retroemit.core.config.config import Config
from retroemit.core.event.context import event_log_context
from retroemit.core.event.errors import describe_listener, log_listener_error
from retroemit.core.event.metrics import EventMetrics, EventMetricsRecorder
from retroemit.core.event.subscription import Subscription
from retroemit.core.event.types import ListenerRecord, ListenerType, invoke_listener
from retroemit.core.exceptions import InvariantViolation
from retroemit.core.logging.logger import get_logger

logger = get_logger(__name__)

_Slots = dict[int, Optional[ListenerRecord]]


class EventEmitter:
    """
    Base emitter: owns the listener registry and performs fan-out.

    Listeners are called as ``listener(*args)``, or as
    ``listener(context, *args)`` when registered with a context.
    """

    def __init__(
        self,
        metrics: Optional[EventMetricsRecorder] = None,
        *,
        enable_metrics: Optional[bool] = None,
    ) -> None:
        """
        Parameters
        ----------
        metrics:
            Optional recorder, e.g. one shared with an EventHolder. A
            private recorder is created if None.
        enable_metrics:
            Whether to collect metrics. Defaults to
            ``Config.EVENT_METRICS_ENABLED``.
        """
        self._listeners_by_type: dict[str, _Slots] = {}
        self._key_counter = itertools.count()
        self._current_subscription: Optional[tuple[str, int]] = None
        self._metrics = metrics or EventMetricsRecorder()
        self._metrics_enabled = (
            Config.EVENT_METRICS_ENABLED if enable_metrics is None else enable_metrics
        )

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def add_listener(
        self,
        event_type: str,
        listener: ListenerType,
        context: Optional[Any] = None,
    ) -> Subscription:
        """
        Register `listener` for `event_type`.

        Returns
        -------
        Subscription:
            Handle that removes precisely this registration.

        Raises
        ------
        TypeError:
            If `listener` is not callable.
        """
        if not callable(listener):
            raise TypeError(f"Listener for '{event_type}' must be callable")

        key = next(self._key_counter)
        self._listeners_by_type.setdefault(event_type, {})[key] = ListenerRecord(
            callback=listener, context=context
        )

        if self._metrics_enabled:
            self._metrics.adjust_listener_count(1)

        logger.debug(
            "EventEmitter: added listener",
            extra={
                "event_type": event_type,
                "listener_key": key,
                "listener": describe_listener(listener),
                "has_context": context is not None,
            },
        )
        return Subscription(self, event_type, key)

    def once(
        self,
        event_type: str,
        listener: ListenerType,
        context: Optional[Any] = None,
    ) -> Subscription:
        """
        Like `add_listener`, but the listener is delivered at most once.

        The registered wrapper removes its own registration before
        delegating, so a reentrant emit from inside `listener` does not
        reach it again.
        """
        if not callable(listener):
            raise TypeError(f"Listener for '{event_type}' must be callable")

        def once_listener(*args: Any) -> Any:
            self.remove_current_listener()
            return invoke_listener(listener, context, args)

        return self.add_listener(event_type, once_listener)

    # ------------------------------------------------------------------ #
    # Removal
    # ------------------------------------------------------------------ #

    def remove_all_listeners(self, event_type: Optional[str] = None) -> None:
        """
        Remove every listener of `event_type`, or of every type if omitted.

        Pending listeners of an emit in progress are skipped afterwards.
        """
        if event_type is None:
            event_types = list(self._listeners_by_type)
        else:
            event_types = [event_type]

        removed = 0
        for current_type in event_types:
            slots = self._listeners_by_type.pop(current_type, None)
            if not slots:
                continue
            for key, record in slots.items():
                if record is not None:
                    slots[key] = None
                    removed += 1

        if self._metrics_enabled:
            self._metrics.adjust_listener_count(-removed)

        logger.debug(
            "EventEmitter: removed all listeners",
            extra={"event_type": event_type or "*", "removed": removed},
        )

    def remove_current_listener(self) -> None:
        """
        Remove the listener that is currently being invoked by `emit`.

        Raises
        ------
        InvariantViolation:
            If called when no emit is in progress.
        """
        if self._current_subscription is None:
            raise InvariantViolation(
                "Not in an emitting cycle; there is no current subscription",
                operation="remove_current_listener",
            )
        event_type, key = self._current_subscription
        self._tombstone(event_type, key)

    def remove_subscription(self, subscription: Subscription) -> None:
        """
        Remove the registration a subscription refers to.

        Prefer ``subscription.release()``. Removing an already removed
        subscription is a no-op.
        """
        self._tombstone(subscription.event_type, subscription.key)

    def _tombstone(self, event_type: str, key: int) -> None:
        slots = self._listeners_by_type.get(event_type)
        if slots is None or slots.get(key) is None:
            return

        slots[key] = None

        if self._metrics_enabled:
            self._metrics.adjust_listener_count(-1)

        logger.debug(
            "EventEmitter: removed listener",
            extra={"event_type": event_type, "listener_key": key},
        )

    # ------------------------------------------------------------------ #
    # Emission
    # ------------------------------------------------------------------ #

    def emit(self, event_type: str, *args: Any) -> None:
        """
        Invoke every listener of `event_type` with `args`.

        Only listeners registered when this call starts are visited, in
        registration order; any of them removed before its turn is skipped.
        A listener exception is logged, counted and re-raised, and the
        remaining listeners of this pass are not invoked.
        """
        if self._metrics_enabled:
            self._metrics.record_emit(event_type)

        slots = self._listeners_by_type.get(event_type)
        if not slots:
            return

        keys = list(slots)
        previous = self._current_subscription

        with event_log_context(event_type, "emit", len(args)):
            try:
                for key in keys:
                    # The listener may have been removed during this pass.
                    record = slots.get(key)
                    if record is None:
                        continue

                    self._current_subscription = (event_type, key)
                    try:
                        record.invoke(args)
                    except Exception as exc:
                        log_listener_error(
                            logger=logger,
                            event_type=event_type,
                            listener=record.callback,
                            exc=exc,
                            metrics=self._metrics if self._metrics_enabled else None,
                            phase="emit",
                        )
                        raise
            finally:
                self._current_subscription = previous

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def listeners(self, event_type: str) -> list[ListenerType]:
        """Active listeners for `event_type`, in registration order."""
        slots = self._listeners_by_type.get(event_type)
        if not slots:
            return []
        return [record.callback for record in slots.values() if record is not None]

    def listener_count(self, event_type: Optional[str] = None) -> int:
        """Active registrations for one type, or across all types."""
        if event_type is not None:
            return len(self.listeners(event_type))
        return sum(
            1
            for slots in self._listeners_by_type.values()
            for record in slots.values()
            if record is not None
        )

    def event_types(self) -> list[str]:
        """Sorted event types that currently have at least one listener."""
        return sorted(
            event_type
            for event_type, slots in self._listeners_by_type.items()
            if any(record is not None for record in slots.values())
        )

    @property
    def is_emitting(self) -> bool:
        return self._current_subscription is not None

    def get_metrics(self) -> Optional[EventMetrics]:
        """Metrics snapshot, or None when metrics are disabled."""
        if not self._metrics_enabled:
            return None
        return self._metrics.snapshot()
