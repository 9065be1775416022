"""
retroemit ValidatingEventEmitter: allow-listed event types.

Wraps any emitter and rejects emission of event types that were not
declared up front. The error names the unknown type and every known one;
with suggestions enabled (development by default) it also proposes the
closest declared type, measured by Damerau-Levenshtein distance.

Registration, removal and introspection pass through untouched, so the
wrapped emitter's contract is unchanged apart from the emit check.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

from retroemit.core.config.config import Config
from retroemit.core.event.subscription import Subscription
from retroemit.core.event.types import EmitterProtocol, ListenerType
from retroemit.core.exceptions import UnknownEventTypeError
from retroemit.core.logging.logger import get_logger

logger = get_logger(__name__)


def damerau_levenshtein_distance(a: str, b: str) -> int:
    """
    Edit distance allowing insertion, deletion, substitution and the
    transposition of two adjacent characters (optimal string alignment).

    >>> damerau_levenshtein_distance("bonk", "honk")
    1
    >>> damerau_levenshtein_distance("ab", "ba")
    1
    """
    rows = len(a) + 1
    cols = len(b) + 1
    d = [[0] * cols for _ in range(rows)]

    for i in range(rows):
        d[i][0] = i
    for j in range(cols):
        d[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            d[i][j] = min(
                d[i - 1][j] + 1,
                d[i][j - 1] + 1,
                d[i - 1][j - 1] + cost,
            )
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                d[i][j] = min(d[i][j], d[i - 2][j - 2] + cost)

    return d[-1][-1]


def suggest_event_type(event_type: str, allowed_types: Iterable[str]) -> Optional[str]:
    """
    Closest allowed type if it is close enough to be a likely typo.

    Returns None when suggestions are disabled, when nothing is declared,
    or when the best candidate is too far away relative to the length of
    `event_type`. Ties go to the type declared first.
    """
    if not Config.EVENT_TYPE_SUGGESTIONS or not event_type:
        return None

    best: Optional[str] = None
    best_distance = 0
    for candidate in allowed_types:
        distance = damerau_levenshtein_distance(event_type, candidate)
        if best is None or distance < best_distance:
            best, best_distance = candidate, distance

    if best is None:
        return None
    if best_distance / len(event_type) < Config.SUGGESTION_MAX_RATIO:
        return best
    return None


class ValidatingEventEmitter:
    """
    Emitter wrapper that only emits declared event types.

    Examples
    --------
    >>> emitter = ValidatingEventEmitter(EventEmitter(), ["honk"])
    >>> emitter.emit("bonk")
    Traceback (most recent call last):
    ...
    UnknownEventTypeError: Unknown event type "bonk". Did you mean "honk"? Known event types: honk.
    """

    def __init__(self, emitter: EmitterProtocol, event_types: Iterable[str]) -> None:
        self._emitter = emitter
        self._event_types: list[str] = []
        self.extend_event_types(event_types)

    @property
    def wrapped(self) -> EmitterProtocol:
        return self._emitter

    @property
    def allowed_event_types(self) -> tuple[str, ...]:
        return tuple(self._event_types)

    def allows(self, event_type: str) -> bool:
        return event_type in self._event_types

    def extend_event_types(self, event_types: Iterable[str]) -> None:
        """Declare more event types. Already declared types are ignored."""
        for event_type in event_types:
            if event_type not in self._event_types:
                self._event_types.append(event_type)

    def assert_allows(self, event_type: str) -> None:
        """
        Raises
        ------
        UnknownEventTypeError:
            If `event_type` was not declared.
        """
        if self.allows(event_type):
            return

        suggestion = suggest_event_type(event_type, self._event_types)
        logger.warning(
            "Rejected unknown event type",
            extra={"event_type": event_type, "suggestion": suggestion},
        )
        raise UnknownEventTypeError(event_type, self._event_types, suggestion)

    # ------------------------------------------------------------------ #
    # Validated emission
    # ------------------------------------------------------------------ #

    def emit(self, event_type: str, *args: Any) -> None:
        self.assert_allows(event_type)
        self._emitter.emit(event_type, *args)

    def emit_and_hold(self, event_type: str, *args: Any) -> None:
        emit_and_hold = getattr(self._emitter, "emit_and_hold", None)
        if emit_and_hold is None:
            raise AttributeError(
                f"{type(self._emitter).__name__} does not support emit_and_hold"
            )
        self.assert_allows(event_type)
        emit_and_hold(event_type, *args)

    # ------------------------------------------------------------------ #
    # Pass-through
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

    def listeners(self, event_type: str) -> list[ListenerType]:
        return self._emitter.listeners(event_type)

    def __getattr__(self, name: str) -> Any:
        # Everything else (retroactive listeners, release hooks, metrics)
        # belongs to the wrapped emitter.
        if name == "_emitter":
            raise AttributeError(name)
        return getattr(self._emitter, name)
