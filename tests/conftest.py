"""
Pytest Configuration and Fixtures for retroemit Tests
=====================================================

Purpose
-------
Centralized fixtures for the retroemit test suite: ready-made emitters,
holders and holding emitters, listener mocks, and helpers for tests that
reconfigure the environment.

Architecture Notes
------------------
- Unit tests only; there is no external infrastructure to stand up
- Every emitter fixture is function-scoped (fresh registry per test)
- Listener doubles come from pytest-mock (`mocker`)
"""

from __future__ import annotations

import os
from typing import Callable, Iterator

import pytest

from retroemit.core.config import Config
from retroemit.core.event import EventEmitter, EventHolder, HoldingEventEmitter
from retroemit.core.event.metrics import EventMetricsRecorder

# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Configure pytest environment."""
    os.environ["RETROEMIT_ENVIRONMENT"] = "testing"
    os.environ["RETROEMIT_LOG_LEVEL"] = "DEBUG"
    os.environ["RETROEMIT_EVENT_METRICS_ENABLED"] = "true"
    Config.validate()


# ============================================================================
# CONFIG FIXTURES
# ============================================================================


@pytest.fixture
def config_env(monkeypatch) -> Iterator[Callable[..., None]]:
    """
    Set ``RETROEMIT_*`` variables and reload Config.

    The environment and Config are restored after the test.

    Usage:
        config_env(ENVIRONMENT="production", DEBUG="true")
    """

    def apply(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(f"RETROEMIT_{key}", value)
        Config.load()

    yield apply

    monkeypatch.undo()
    Config.validate()


# ============================================================================
# EVENT FIXTURES
# ============================================================================


@pytest.fixture
def metrics_recorder() -> EventMetricsRecorder:
    return EventMetricsRecorder()


@pytest.fixture
def emitter(metrics_recorder) -> EventEmitter:
    """Base emitter with metrics enabled."""
    return EventEmitter(metrics_recorder, enable_metrics=True)


@pytest.fixture
def holder(metrics_recorder) -> EventHolder:
    """Holder sharing the emitter's metrics recorder."""
    return EventHolder(metrics_recorder, enable_metrics=True)


@pytest.fixture
def holding_emitter(emitter, holder) -> HoldingEventEmitter:
    return HoldingEventEmitter(emitter, holder)


@pytest.fixture
def listener(mocker):
    """A plain listener double."""
    return mocker.MagicMock(name="listener")


@pytest.fixture
def make_listener(mocker) -> Callable[..., object]:
    """
    Factory for named listener doubles.

    Usage:
        first = make_listener("first")
    """

    def factory(name: str = "listener", side_effect=None):
        return mocker.MagicMock(name=name, side_effect=side_effect)

    return factory
