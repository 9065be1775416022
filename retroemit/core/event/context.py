"""
Event Log Context Helpers for retroemit.

Tags every log record produced while a listener runs with the event type
being delivered and the delivery phase, so logs written from inside
listeners can be traced back to the dispatch that triggered them.

Only the event type and the argument count are recorded; argument values
never enter the log context.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from retroemit.core.logging.logger import reset_log_context, set_log_context


@contextmanager
def event_log_context(event_type: str, operation: str, arg_count: int) -> Iterator[None]:
    """
    Apply event fields to the log context for the duration of a dispatch.

    The previous context is restored on exit, including when a listener
    raises, so nested dispatches unwind correctly.

    Examples
    --------
    >>> with event_log_context("click", "emit", 1):
    ...     logger.info("inside")  # carries event_type="click"
    """
    token = set_log_context(
        operation=operation,
        event_type=event_type,
        event_arg_count=arg_count,
    )
    try:
        yield
    finally:
        reset_log_context(token)
