"""
EventMetrics and EventMetricsRecorder for retroemit.

Purpose
-------
Provides metrics collection and reporting for emitters and holders.

Responsibilities
----------------
- Record emits, holds and held-event releases by event type
- Record listener errors by event type
- Track the number of active listener registrations
- Provide immutable snapshots of metrics and a formatted summary

Design Decisions
----------------
- **Immutable snapshots**: EventMetrics is frozen; mutations go through
  the recorder
- **Defaultdict usage**: Simplifies counting without key existence checks
- **Shareable recorder**: an emitter and a holder may be given the same
  recorder so a holding emitter reports one combined picture
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class EventMetrics:
    """
    Immutable snapshot of emitter metrics.

    Attributes
    ----------
    events_emitted:
        Mapping of event types to emit counts.
    events_held:
        Mapping of event types to hold counts.
    events_released:
        Mapping of event types to released held-record counts.
    listener_errors:
        Mapping of event types to listener error counts.
    total_listeners:
        Current number of active listener registrations.

    Examples
    --------
    >>> metrics = EventMetrics(
    ...     events_emitted={"click": 50},
    ...     listener_errors={"click": 1},
    ...     total_listeners=3,
    ... )
    >>> metrics.get_summary()["error_rate"]
    2.0
    """

    events_emitted: dict[str, int] = field(default_factory=dict)
    events_held: dict[str, int] = field(default_factory=dict)
    events_released: dict[str, int] = field(default_factory=dict)
    listener_errors: dict[str, int] = field(default_factory=dict)
    total_listeners: int = 0

    def get_summary(self) -> dict[str, Any]:
        """
        Generate a formatted summary of metrics.

        Returns
        -------
        dict[str, Any]:
            Totals and per-type breakdowns, plus `error_rate` as the
            percentage of emits that saw a listener error (0-100).
        """
        total_emitted = sum(self.events_emitted.values())
        total_errors = sum(self.listener_errors.values())

        error_rate = (total_errors / max(1, total_emitted)) * 100.0

        return {
            "total_events_emitted": total_emitted,
            "events_by_type": dict(self.events_emitted),
            "total_events_held": sum(self.events_held.values()),
            "held_by_type": dict(self.events_held),
            "total_events_released": sum(self.events_released.values()),
            "total_errors": total_errors,
            "errors_by_event": dict(self.listener_errors),
            "total_listeners": self.total_listeners,
            "error_rate": round(error_rate, 2),
        }


class EventMetricsRecorder:
    """
    Mutable metrics recorder.

    Thread Safety
    -------------
    Not thread-safe. Emitters are single-threaded by contract.

    Examples
    --------
    >>> recorder = EventMetricsRecorder()
    >>> recorder.record_emit("click")
    >>> recorder.adjust_listener_count(2)
    >>> recorder.snapshot().total_listeners
    2
    """

    def __init__(self) -> None:
        self._events_emitted: defaultdict[str, int] = defaultdict(int)
        self._events_held: defaultdict[str, int] = defaultdict(int)
        self._events_released: defaultdict[str, int] = defaultdict(int)
        self._listener_errors: defaultdict[str, int] = defaultdict(int)
        self._total_listeners: int = 0

    def record_emit(self, event_type: str) -> None:
        self._events_emitted[event_type] += 1

    def record_hold(self, event_type: str) -> None:
        self._events_held[event_type] += 1

    def record_release(self, event_type: str, count: int = 1) -> None:
        if count > 0:
            self._events_released[event_type] += count

    def record_error(self, event_type: str) -> None:
        self._listener_errors[event_type] += 1

    @property
    def total_listeners(self) -> int:
        return self._total_listeners

    def adjust_listener_count(self, delta: int) -> None:
        """
        Adjust the active listener count by `delta`.

        The count is clamped to 0 (never goes negative).
        """
        self._total_listeners = max(0, self._total_listeners + delta)

    def reset(self) -> None:
        """Forget everything recorded so far."""
        self._events_emitted.clear()
        self._events_held.clear()
        self._events_released.clear()
        self._listener_errors.clear()
        self._total_listeners = 0

    def snapshot(self) -> EventMetrics:
        """
        Return an immutable snapshot of current metrics.

        Creates new dict instances to prevent accidental mutation leaks.
        """
        return EventMetrics(
            events_emitted=dict(self._events_emitted),
            events_held=dict(self._events_held),
            events_released=dict(self._events_released),
            listener_errors=dict(self._listener_errors),
            total_listeners=self._total_listeners,
        )
