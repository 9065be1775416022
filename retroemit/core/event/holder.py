"""
retroemit EventHolder: retained events for late subscribers.

Purpose
-------
Keeps an ordered backlog of emitted events per type so that listeners
registered later can be handed everything they missed. Each retained
event is identified by a HeldEventToken and can be released on its own,
or together with the rest of its type.

Responsibilities
----------------
- Retain event arguments (`hold_event`) and vend a token per record
- Replay the backlog of a type to a single listener (`emit_to_listener`)
- Release records: the one being replayed, one by token, or a whole type
- Introspection of what is currently held

Design Decisions
----------------
- **Tombstones**: released records become None in place, so a replay in
  progress never has its keys shifted underneath it.
- **Cursor stack**: replays nest (a replayed listener may register
  another retroactive listener), so the "current event" is a LIFO stack
  of tokens rather than a single field. The top is the innermost replay.
- **Keys are never reused**: one counter per holder, so a stale token
  never targets a newer record.
"""

from __future__ import annotations

import itertools
from typing import Any, Optional

from retroemit.core.config.config import Config
from retroemit.core.event.context import event_log_context
from retroemit.core.event.errors import log_listener_error
from retroemit.core.event.metrics import EventMetrics, EventMetricsRecorder
from retroemit.core.event.types import HeldEventToken, ListenerType, invoke_listener
from retroemit.core.exceptions import InvariantViolation
from retroemit.core.logging.logger import get_logger

logger = get_logger(__name__)

_Records = dict[int, Optional[tuple[Any, ...]]]


class EventHolder:
    """
    Ordered per-type store of held events with token-precise release.

    Examples
    --------
    >>> holder = EventHolder()
    >>> token = holder.hold_event("ready", 42)
    >>> holder.emit_to_listener("ready", print)
    42
    >>> holder.release_event(token)
    >>> holder.held_count("ready")
    0
    """

    def __init__(
        self,
        metrics: Optional[EventMetricsRecorder] = None,
        *,
        enable_metrics: Optional[bool] = None,
    ) -> None:
        self._records_by_type: dict[str, _Records] = {}
        self._key_counter = itertools.count()
        self._current_events: list[HeldEventToken] = []
        self._metrics = metrics or EventMetricsRecorder()
        self._metrics_enabled = (
            Config.EVENT_METRICS_ENABLED if enable_metrics is None else enable_metrics
        )

    def hold_event(self, event_type: str, *args: Any) -> HeldEventToken:
        """Append a record of `args` to the backlog of `event_type`."""
        key = next(self._key_counter)
        self._records_by_type.setdefault(event_type, {})[key] = args

        if self._metrics_enabled:
            self._metrics.record_hold(event_type)

        logger.debug(
            "EventHolder: held event",
            extra={"event_type": event_type, "held_key": key, "arg_count": len(args)},
        )
        return HeldEventToken(event_type=event_type, key=key)

    def emit_to_listener(
        self,
        event_type: str,
        listener: ListenerType,
        context: Optional[Any] = None,
    ) -> None:
        """
        Replay every record of `event_type` held right now to `listener`.

        Records held during the replay are not visited by it; records
        released during the replay are skipped once their turn comes.
        While the listener runs, its record is the current event.
        """
        records = self._records_by_type.get(event_type)
        if not records:
            return

        keys = list(records)

        for key in keys:
            args = records.get(key)
            if args is None:
                continue

            self._current_events.append(HeldEventToken(event_type=event_type, key=key))
            try:
                with event_log_context(event_type, "replay", len(args)):
                    invoke_listener(listener, context, args)
            except Exception as exc:
                log_listener_error(
                    logger=logger,
                    event_type=event_type,
                    listener=listener,
                    exc=exc,
                    metrics=self._metrics if self._metrics_enabled else None,
                    phase="replay",
                )
                raise
            finally:
                self._current_events.pop()

    def release_current_event(self) -> None:
        """
        Release the record currently being replayed (innermost replay).

        Raises
        ------
        InvariantViolation:
            If no replay is in progress.
        """
        if not self._current_events:
            raise InvariantViolation(
                "Not in an emitting cycle; there is no current event",
                operation="release_current_event",
            )
        self.release_event(self._current_events[-1])

    def release_event(self, token: HeldEventToken) -> None:
        """Release one record. Unknown or already released tokens are ignored."""
        records = self._records_by_type.get(token.event_type)
        if records is None or records.get(token.key) is None:
            return

        records[token.key] = None

        if self._metrics_enabled:
            self._metrics.record_release(token.event_type)

        logger.debug(
            "EventHolder: released event",
            extra={"event_type": token.event_type, "held_key": token.key},
        )

    def release_event_type(self, event_type: str) -> None:
        """Discard every record held for `event_type`."""
        records = self._records_by_type.pop(event_type, None)
        if not records:
            return

        released = 0
        for key, args in records.items():
            if args is not None:
                records[key] = None
                released += 1

        if self._metrics_enabled:
            self._metrics.record_release(event_type, released)

        logger.debug(
            "EventHolder: released event type",
            extra={"event_type": event_type, "released": released},
        )

    def held_count(self, event_type: Optional[str] = None) -> int:
        if event_type is not None:
            return len(self.held_events(event_type))
        return sum(
            1
            for records in self._records_by_type.values()
            for args in records.values()
            if args is not None
        )

    def held_events(self, event_type: str) -> list[tuple[Any, ...]]:
        """Argument tuples still held for `event_type`, oldest first."""
        records = self._records_by_type.get(event_type)
        if not records:
            return []
        return [args for args in records.values() if args is not None]

    @property
    def is_replaying(self) -> bool:
        return bool(self._current_events)

    def get_metrics(self) -> Optional[EventMetrics]:
        if not self._metrics_enabled:
            return None
        return self._metrics.snapshot()
