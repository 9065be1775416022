"""
retroemit Logging Subsystem

Purpose
-------
Structured logging for the emitter primitives. Records logged while a
listener runs carry the event type being dispatched (see
`retroemit.core.event.context`), so a failure deep inside a listener can
be traced back to the emit or replay that triggered it.

Pipeline
--------
    logger -> ContextFilter -> bounded queue -> QueueListener -> console / file

- `setup_logging()` installs the pipeline on the root logger; importing
  retroemit never does.
- The queue is bounded. When it is full, records are dropped and counted
  rather than blocking the emitting thread.
- Console output is JSON in production, plain or colored text elsewhere.
  The optional daily file is always JSON.
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from retroemit.core.config.config import Config


CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(event_type)-16s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DAILY_LOG_NAME = "retroemit_daily.json.log"
QUEUE_MAX_SIZE = 10_000

_log_context: ContextVar[Dict[str, Any]] = ContextVar("retroemit_log_context", default={})


@dataclass(frozen=True, slots=True)
class LoggerConfig:
    """Logging settings resolved from `Config` at setup time."""

    level: int
    use_json: bool
    use_colors: bool
    log_to_file: bool
    logs_dir: Path

    @classmethod
    def from_config(cls) -> "LoggerConfig":
        use_json = Config.is_production() if Config.LOG_JSON is None else bool(Config.LOG_JSON)
        return cls(
            level=getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO),
            use_json=use_json,
            use_colors=not use_json and bool(Config.LOG_COLORS) and sys.stdout.isatty(),
            log_to_file=bool(Config.LOG_TO_FILE),
            logs_dir=Path(Config.LOGS_DIR).resolve(),
        )


@dataclass(frozen=True, slots=True)
class LoggingHealth:
    initialized: bool
    queue_size: int
    queue_max_size: int
    records_dropped: int


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Copy the current log context onto every record passing the handler."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _log_context.get({})

        # An explicit extra={"event_type": ...} beats the ambient context
        if not hasattr(record, "event_type"):
            record.event_type = context.get("event_type", "N/A")
        record.correlation_id = context.get("correlation_id") or "N/A"
        record.component = context.get("component") or record.name.split(".", 1)[0]
        record.operation = context.get("operation") or "N/A"
        return True


class ColoredFormatter(logging.Formatter):
    """Text formatter that tints warnings yellow and errors red."""

    RESET = "\033[0m"

    @staticmethod
    def color_for(levelno: int) -> str:
        if levelno >= logging.ERROR:
            return "\033[31m"
        if levelno >= logging.WARNING:
            return "\033[33m"
        return ""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        line = super().format(record)
        color = self.color_for(record.levelno)
        return f"{color}{line}{self.RESET}" if color else line


class JSONFormatter(logging.Formatter):
    """One JSON object per record; unknown record attributes go under "extra"."""

    CONTEXT_FIELDS = ("event_type", "correlation_id", "component", "operation")

    # Everything a bare LogRecord carries, plus what formatters add to it
    RESERVED = frozenset(
        vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        for field in self.CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value not in (None, "N/A"):
                data[field] = value

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in self.RESERVED
            and key not in self.CONTEXT_FIELDS
            and not key.startswith("_")
        }
        if extra:
            data["extra"] = extra

        return json.dumps(data, ensure_ascii=False, default=repr)


class DroppingQueueHandler(QueueHandler):
    """Queue handler that counts and drops records instead of blocking."""

    dropped: int = 0

    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            DroppingQueueHandler.dropped += 1


# ============================================================================
# Setup / Shutdown
# ============================================================================


@dataclass(slots=True)
class _Pipeline:
    log_queue: "queue.Queue[logging.LogRecord]"
    handler: DroppingQueueHandler
    listener: QueueListener


_pipeline: Optional[_Pipeline] = None


def _build_output_handlers(settings: LoggerConfig) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    if settings.use_json:
        console.setFormatter(JSONFormatter())
    else:
        text_formatter = ColoredFormatter if settings.use_colors else logging.Formatter
        console.setFormatter(text_formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    handlers: List[logging.Handler] = [console]

    if settings.log_to_file:
        settings.logs_dir.mkdir(parents=True, exist_ok=True)
        daily = TimedRotatingFileHandler(
            filename=str(settings.logs_dir / DAILY_LOG_NAME),
            when="midnight",
            backupCount=1,
            encoding="utf-8",
            utc=True,
        )
        daily.setFormatter(JSONFormatter())
        handlers.append(daily)

    for handler in handlers:
        handler.setLevel(settings.level)
    return handlers


def setup_logging() -> None:
    """
    Install the queue-backed logging pipeline on the root logger.

    Calling it again is a no-op until `shutdown_logging()`.
    """
    global _pipeline

    if _pipeline is not None:
        return

    settings = LoggerConfig.from_config()
    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(QUEUE_MAX_SIZE)

    listener = QueueListener(
        log_queue, *_build_output_handlers(settings), respect_handler_level=True
    )
    listener.start()

    handler = DroppingQueueHandler(log_queue)
    handler.setLevel(settings.level)
    handler.addFilter(ContextFilter())

    root = logging.getLogger()
    root.setLevel(settings.level)
    root.addHandler(handler)
    DroppingQueueHandler.dropped = 0
    _pipeline = _Pipeline(log_queue=log_queue, handler=handler, listener=listener)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": logging.getLevelName(settings.level),
            "json": settings.use_json,
            "log_to_file": settings.log_to_file,
        },
    )


def shutdown_logging() -> None:
    """Drain the queue, close output handlers and detach from the root logger."""
    global _pipeline

    if _pipeline is None:
        return

    pipeline, _pipeline = _pipeline, None
    logging.getLogger().removeHandler(pipeline.handler)
    pipeline.handler.close()

    # stop() flushes whatever is still queued
    pipeline.listener.stop()
    for output in pipeline.listener.handlers:
        output.flush()
        output.close()


def get_logging_health() -> LoggingHealth:
    if _pipeline is None:
        return LoggingHealth(
            initialized=False,
            queue_size=0,
            queue_max_size=0,
            records_dropped=DroppingQueueHandler.dropped,
        )
    return LoggingHealth(
        initialized=True,
        queue_size=_pipeline.log_queue.qsize(),
        queue_max_size=_pipeline.log_queue.maxsize,
        records_dropped=DroppingQueueHandler.dropped,
    )


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Scope log context fields to a block.

    A fresh correlation id is generated unless one is given.

    >>> with LogContext(component="checkout", operation="emit"):
    ...     logger.info("dispatching")
    """

    def __init__(
        self,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        self.context: Dict[str, Any] = dict(_log_context.get({}))
        self.context["correlation_id"] = correlation_id or uuid.uuid4().hex[:8]
        self.context.update(extra)
        if component is not None:
            self.context["component"] = component
        if operation is not None:
            self.context["operation"] = operation
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


def set_log_context(
    component: Optional[str] = None,
    operation: Optional[str] = None,
    correlation_id: Optional[str] = None,
    **extra: Any,
) -> Token[Dict[str, Any]]:
    """
    Merge fields into the current log context.

    Returns the ContextVar token; pass it to `reset_log_context()` to undo.
    """
    fields = dict(extra)
    if component is not None:
        fields["component"] = component
    if operation is not None:
        fields["operation"] = operation
    if correlation_id:
        fields["correlation_id"] = correlation_id
    return _log_context.set({**_log_context.get({}), **fields})


def reset_log_context(token: Token[Dict[str, Any]]) -> None:
    _log_context.reset(token)


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get({}))


def clear_log_context() -> None:
    _log_context.set({})
