"""
Error Handling Helpers for retroemit listeners.

Purpose
-------
Centralizes what happens when a listener raises during a live emit or a
held-event replay: the failure is logged with full context and counted in
metrics, then the original exception continues to propagate to whoever
called `emit`. Delivery is synchronous, so the caller owns the failure;
nothing here swallows it.
"""

from __future__ import annotations

import logging
from logging import Logger
from typing import Optional

from retroemit.core.event.metrics import EventMetricsRecorder
from retroemit.core.event.types import ListenerType
from retroemit.core.exceptions import get_error_severity, should_alert


def describe_listener(listener: ListenerType) -> str:
    """Best-effort dotted name for a listener, used in log fields."""
    module = getattr(listener, "__module__", None) or "unknown"
    qualname = getattr(listener, "__qualname__", None) or getattr(
        listener, "__name__", None
    )
    if qualname is None:
        return repr(listener)
    return f"{module}.{qualname}"


def log_listener_error(
    *,
    logger: Logger,
    event_type: str,
    listener: ListenerType,
    exc: Exception,
    metrics: Optional[EventMetricsRecorder],
    phase: str,
) -> None:
    """
    Log a listener failure and update metrics.

    Failures whose severity warrants alerting (plain exceptions, and
    retroemit errors at ERROR or above) log at ERROR; milder retroemit
    errors such as an undeclared event type log at WARNING.

    Parameters
    ----------
    logger:
        Logger instance to use.
    event_type:
        Event type that was being delivered.
    listener:
        The listener that raised.
    exc:
        The exception that was raised.
    metrics:
        Optional recorder to update. If None, metrics are skipped.
    phase:
        "emit" for live delivery, "replay" for held-event delivery.

    Examples
    --------
    >>> try:
    ...     record.invoke(args)
    ... except Exception as exc:
    ...     log_listener_error(
    ...         logger=logger,
    ...         event_type="click",
    ...         listener=record.callback,
    ...         exc=exc,
    ...         metrics=recorder,
    ...         phase="emit",
    ...     )
    ...     raise
    """
    if metrics is not None:
        metrics.record_error(event_type)

    logger.log(
        logging.ERROR if should_alert(exc) else logging.WARNING,
        "Listener raised during %s",
        phase,
        extra={
            "event_type": event_type,
            "listener": describe_listener(listener),
            "phase": phase,
            "error": str(exc),
            "error_type": type(exc).__name__,
            "severity": get_error_severity(exc).value,
        },
        exc_info=(type(exc), exc, exc.__traceback__),
    )
