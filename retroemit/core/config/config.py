"""
Static configuration management for retroemit.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to all static configuration values
- Validate settings and fall back to defaults on bad input
- Track configuration loading metrics

Architecture Notes
------------------
- Singleton pattern via class methods (no instantiation)
- Auto-loads on module import via Config.validate()
- `Config.load()` can be called again to re-read the environment
  (tests use this after monkeypatching variables)
- All keys are read with the ``RETROEMIT_`` prefix

Environment Variables
---------------------
- RETROEMIT_ENVIRONMENT: development/testing/staging/production
  (default: development)
- RETROEMIT_DEBUG: Debug mode flag (default: False)
- RETROEMIT_LOG_LEVEL: Logging level (default: INFO)
- RETROEMIT_LOG_JSON: Force JSON console logs (default: production only)
- RETROEMIT_LOG_COLORS: Colored console logs in dev (default: True)
- RETROEMIT_LOG_TO_FILE: Also write a rotating JSON log file (default: False)
- RETROEMIT_LOGS_DIR: Directory for the log file (default: ./logs)
- RETROEMIT_EVENT_METRICS_ENABLED: Collect emitter metrics (default: True)
- RETROEMIT_EVENT_TYPE_SUGGESTIONS: "Did you mean" hints for unknown event
  types (default: on in development only)
- RETROEMIT_SUGGESTION_MAX_RATIO: Max edit distance / name length for a
  hint to be offered (default: 0.334)
"""

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from retroemit.core.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()

ENV_PREFIX = "RETROEMIT_"


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


# ============================================================================
# Configuration Metrics Tracker
# ============================================================================


class _ConfigLoadMetrics:
    """
    Internal metrics tracker for configuration loading.

    Tracks which configuration values came from environment variables
    versus defaults, and any validation errors encountered.
    """

    def __init__(self):
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}
        self.last_reload: Optional[str] = None

    def record_env_load(self, key: str, from_env: bool, value: Any, default: Any):
        """Record whether a config value came from environment."""
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default
        else:
            self.defaults_used.pop(key, None)

    def record_validation_error(self, key: str, error: str):
        """Record a validation error."""
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration loading summary."""
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": list(self.defaults_used.keys()),
            "last_reload": self.last_reload,
        }


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Centralized static configuration for retroemit.

    Usage
    -----
    >>> if Config.is_development():
    ...     print("suggestions on:", Config.EVENT_TYPE_SUGGESTIONS)
    >>> summary = Config.get_config_summary()
    """

    _metrics: Optional[_ConfigLoadMetrics] = None
    _enable_metrics: bool = True
    _validated: bool = False

    # =========================================================================
    # Environment Configuration
    # =========================================================================

    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # =========================================================================
    # Logging Configuration
    # =========================================================================

    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True
    LOG_TO_FILE: bool = False
    LOGS_DIR: Path = Path.cwd() / "logs"

    # =========================================================================
    # Emitter Configuration
    # =========================================================================

    EVENT_METRICS_ENABLED: bool = True
    EVENT_TYPE_SUGGESTIONS: bool = True
    SUGGESTION_MAX_RATIO: float = 0.334

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @classmethod
    def _init_metrics(cls):
        """Initialize metrics tracking if enabled."""
        if cls._enable_metrics and cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _record_error(cls, key: str, error: str) -> None:
        logging.warning(error)
        if cls._metrics:
            cls._metrics.record_validation_error(key, error)

    @classmethod
    def _safe_float(
        cls,
        key: str,
        default: float,
        min_val: Optional[float] = None,
        max_val: Optional[float] = None,
    ) -> float:
        """
        Safely parse a float from environment with validation.

        Parameters
        ----------
        key:
            Variable name without the ``RETROEMIT_`` prefix.
        default:
            Default value if not set or invalid.
        min_val:
            Minimum allowed value (inclusive).
        max_val:
            Maximum allowed value (inclusive).
        """
        cls._init_metrics()

        env_key = ENV_PREFIX + key
        raw_value = os.getenv(env_key)

        if raw_value is None:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, default, default)
            return default

        try:
            value = float(raw_value)
        except ValueError:
            cls._record_error(
                key, f"{env_key}='{raw_value}' is not a valid number, using default {default}"
            )
            return default

        if min_val is not None and value < min_val:
            cls._record_error(
                key, f"{env_key}={value} is below minimum {min_val}, using default {default}"
            )
            return default

        if max_val is not None and value > max_val:
            cls._record_error(
                key, f"{env_key}={value} exceeds maximum {max_val}, using default {default}"
            )
            return default

        if cls._metrics:
            cls._metrics.record_env_load(key, True, value, default)
        return value

    @classmethod
    def _safe_bool(cls, key: str, default: bool) -> bool:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).

        Example
        -------
        >>> Config._safe_bool("DEBUG", False)
        False
        """
        cls._init_metrics()

        env_key = ENV_PREFIX + key
        raw_value = os.getenv(env_key)

        if raw_value is None:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, default, default)
            return default

        normalized = raw_value.lower().strip()
        true_values = {"true", "yes", "1", "on"}
        false_values = {"false", "no", "0", "off"}

        if normalized in true_values:
            value = True
        elif normalized in false_values:
            value = False
        else:
            cls._record_error(
                key, f"{env_key}='{raw_value}' is not a valid boolean, using default {default}"
            )
            return default

        if cls._metrics:
            cls._metrics.record_env_load(key, True, value, default)

        return value

    @classmethod
    def _safe_optional_bool(cls, key: str) -> Optional[bool]:
        """Parse a tri-state boolean: unset (or invalid) means None."""
        cls._init_metrics()

        raw_value = os.getenv(ENV_PREFIX + key)
        if raw_value is None:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, None, None)
            return None

        normalized = raw_value.lower().strip()
        if normalized in {"true", "yes", "1", "on"}:
            value = True
        elif normalized in {"false", "no", "0", "off"}:
            value = False
        else:
            cls._record_error(
                key, f"{ENV_PREFIX + key}='{raw_value}' is not a valid boolean, ignoring"
            )
            return None

        if cls._metrics:
            cls._metrics.record_env_load(key, True, value, None)
        return value

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        """
        Safely get string from environment.

        Example
        -------
        >>> Config._safe_str("LOG_LEVEL", "INFO")
        'INFO'
        """
        cls._init_metrics()

        env_key = ENV_PREFIX + key
        value = os.getenv(env_key, default)
        from_env = env_key in os.environ

        if cls._metrics:
            cls._metrics.record_env_load(key, from_env, value, default)

        return value

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables with validation.

        Called automatically on module import; call again to re-read the
        environment.
        """
        cls._init_metrics()
        if cls._metrics:
            cls._metrics.validation_errors.clear()

        cls.ENVIRONMENT = Environment.from_string(
            cls._safe_str("ENVIRONMENT", "development")
        ).value
        cls.DEBUG = cls._safe_bool("DEBUG", False)
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO").upper()

        cls.LOG_JSON = cls._safe_optional_bool("LOG_JSON")
        cls.LOG_COLORS = cls._safe_bool("LOG_COLORS", True)
        cls.LOG_TO_FILE = cls._safe_bool("LOG_TO_FILE", False)
        cls.LOGS_DIR = Path(cls._safe_str("LOGS_DIR", str(Path.cwd() / "logs")))

        cls.EVENT_METRICS_ENABLED = cls._safe_bool("EVENT_METRICS_ENABLED", True)
        # Suggestions default to development builds only
        cls.EVENT_TYPE_SUGGESTIONS = cls._safe_bool(
            "EVENT_TYPE_SUGGESTIONS", cls.is_development()
        )
        cls.SUGGESTION_MAX_RATIO = cls._safe_float(
            "SUGGESTION_MAX_RATIO", 0.334, min_val=0.0, max_val=1.0
        )

        if cls._metrics:
            cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Load configuration and validate the values that can be wrong.

        Outside production, invalid values are logged and replaced with
        defaults. In production the first one is raised.

        Raises:
            ConfigurationError: If a value was invalid in production.
        """
        logger = logging.getLogger(__name__)
        cls._init_metrics()

        cls.load()

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if cls.LOG_LEVEL not in valid_log_levels:
            cls._record_error(
                "LOG_LEVEL", f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO"
            )
            cls.LOG_LEVEL = "INFO"

        if cls.is_production() and cls.DEBUG:
            logger.warning("DEBUG mode enabled in production!")

        errors = cls._metrics.validation_errors if cls._metrics else {}
        if errors and cls.is_production():
            key, message = next(iter(errors.items()))
            raise ConfigurationError(key, message)

        cls._validated = True

        if errors:
            logger.warning(
                f"Configuration warnings: {errors}"
            )

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"

    @classmethod
    def is_testing(cls) -> bool:
        """Check if running in testing environment."""
        return cls.ENVIRONMENT.lower() == "testing"

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def get_metrics(cls) -> Optional[_ConfigLoadMetrics]:
        """Get configuration loading metrics."""
        return cls._metrics

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """
        Get configuration summary for debugging.

        Example
        -------
        >>> Config.get_config_summary()["environment"]
        'development'
        """
        return {
            "environment": cls.ENVIRONMENT,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "log_to_file": cls.LOG_TO_FILE,
            "event_metrics_enabled": cls.EVENT_METRICS_ENABLED,
            "event_type_suggestions": cls.EVENT_TYPE_SUGGESTIONS,
            "suggestion_max_ratio": cls.SUGGESTION_MAX_RATIO,
        }


# Auto-validate on import
Config.validate()
