"""
Exceptions for retroemit.

Purpose
-------
Define the structured exception hierarchy for the emitter primitives:
invariant violations (programmer errors such as removing the current
listener outside an emitting cycle), validation failures for undeclared
event types, and configuration errors.

Design Notes
------------
- All retroemit exceptions inherit from `RetroEmitException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `error_code`: short, stable identifier for programmatic use
- Invariant violations are never retryable: they signal misuse of the API,
  not a transient condition.
- `UnknownEventTypeError` also derives from `TypeError` so callers can
  treat it the way they treat any other bad-argument error.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Sequence


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class RetroEmitException(Exception):
    """
    Base exception for all retroemit errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        error_code: Optional code for programmatic handling

    Example:
        >>> raise RetroEmitException(
        ...     "Emitter misuse",
        ...     {"event_type": "click"}
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
        }

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}"
            ")"
        )


class InvariantViolation(RetroEmitException):
    """
    Raised when an emitter API is used outside the state it requires.

    Two conditions raise this today:
    - removing the current listener when no emission is in progress
    - releasing the current event when no replay is in progress

    Args:
        message: Description of the violated invariant
        operation: Name of the operation that was misused
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        self.operation = operation
        super().__init__(
            message,
            details={"operation": operation} if operation else None,
            error_code="INVARIANT_VIOLATION",
        )


class UnknownEventTypeError(RetroEmitException, TypeError):
    """
    Raised when emitting an event type that was not declared up front.

    Args:
        event_type: The rejected event type
        allowed_types: Declared event types, in declaration order
        suggestion: Closest declared type, if one was close enough
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING

    def __init__(
        self,
        event_type: str,
        allowed_types: Sequence[str],
        suggestion: Optional[str] = None,
    ) -> None:
        self.event_type = event_type
        self.allowed_types = tuple(allowed_types)
        self.suggestion = suggestion

        message = f'Unknown event type "{event_type}". '
        if suggestion is not None:
            message += f'Did you mean "{suggestion}"? '
        message += f"Known event types: {', '.join(self.allowed_types)}."

        super().__init__(
            message,
            details={
                "event_type": event_type,
                "allowed_types": list(self.allowed_types),
                "suggestion": suggestion,
            },
            error_code="UNKNOWN_EVENT_TYPE",
        )


class ConfigurationError(RetroEmitException):
    """
    Raised when a configuration key is invalid or missing.

    Args:
        config_key: The configuration key that has issues
        message: Description of the configuration problem
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        error_message = f"Configuration error for {config_key}: {message}"
        super().__init__(
            error_message,
            details={
                "config_key": config_key,
                "message": message,
            },
            error_code="CONFIG_ERROR",
        )


# Utility functions for exception handling patterns


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """
    Get the severity level of an exception for logging.

    Args:
        exc: Exception to check

    Returns:
        ErrorSeverity level.
    """
    if isinstance(exc, RetroEmitException):
        return exc.severity
    return ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    """
    Determine if an exception should trigger alerting.

    Args:
        exc: Exception to check

    Returns:
        True if severity is ERROR or CRITICAL, False otherwise.
    """
    severity = get_error_severity(exc)
    return severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)


__all__ = [
    "ErrorSeverity",
    "RetroEmitException",
    "InvariantViolation",
    "UnknownEventTypeError",
    "ConfigurationError",
    "get_error_severity",
    "should_alert",
]
