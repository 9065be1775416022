"""
Unit Tests for ValidatingEventEmitter and event type suggestions
================================================================

Test Coverage
-------------
- Unknown event types are rejected with a descriptive TypeError
- "Did you mean" suggestions: distance, threshold, ties, on/off switch
- Pass-through of every non-emit operation
"""

import pytest

from retroemit.core.config import Config
from retroemit.core.event import (
    EventEmitter,
    ValidatingEventEmitter,
    create_event_emitter,
    damerau_levenshtein_distance,
    suggest_event_type,
)
from retroemit.core.exceptions import UnknownEventTypeError


@pytest.fixture
def suggestions_on(monkeypatch):
    monkeypatch.setattr(Config, "EVENT_TYPE_SUGGESTIONS", True)
    monkeypatch.setattr(Config, "SUGGESTION_MAX_RATIO", 0.334)


@pytest.fixture
def suggestions_off(monkeypatch):
    monkeypatch.setattr(Config, "EVENT_TYPE_SUGGESTIONS", False)


# ============================================================================
# EDIT DISTANCE
# ============================================================================


@pytest.mark.unit
@pytest.mark.event
class TestDamerauLevenshteinDistance:
    """Test the optimal string alignment distance."""

    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("honk", "honk", 0),
            ("bonk", "honk", 1),
            ("vrooom", "vroom", 1),
            ("hnok", "honk", 1),
            ("", "abc", 3),
            ("kitten", "sitting", 3),
            ("ca", "abc", 3),
        ],
    )
    def test_distance(self, a, b, expected):
        # Arrange & Act & Assert
        assert damerau_levenshtein_distance(a, b) == expected


# ============================================================================
# SUGGESTIONS
# ============================================================================


@pytest.mark.unit
@pytest.mark.event
class TestSuggestEventType:
    """Test suggestion selection."""

    def test_close_type_is_suggested(self, suggestions_on):
        assert suggest_event_type("bonk", ["honk"]) == "honk"

    def test_distant_type_is_not_suggested(self, suggestions_on):
        assert suggest_event_type("quack", ["honk"]) is None

    def test_tie_goes_to_first_declared(self, suggestions_on):
        assert suggest_event_type("bonk", ["bank", "honk"]) == "bank"

    def test_closest_wins_over_declaration_order(self, suggestions_on):
        assert suggest_event_type("change", ["chunks", "changed"]) == "changed"

    def test_empty_type_has_no_suggestion(self, suggestions_on):
        assert suggest_event_type("", ["a"]) is None

    def test_no_declared_types(self, suggestions_on):
        assert suggest_event_type("bonk", []) is None

    def test_disabled_suggestions(self, suggestions_off):
        assert suggest_event_type("bonk", ["honk"]) is None

    def test_ratio_is_configurable(self, suggestions_on, monkeypatch):
        # Arrange
        monkeypatch.setattr(Config, "SUGGESTION_MAX_RATIO", 0.1)

        # Act & Assert
        assert suggest_event_type("bonk", ["honk"]) is None


# ============================================================================
# VALIDATING EMITTER
# ============================================================================


@pytest.mark.unit
@pytest.mark.event
class TestValidatingEventEmitter:
    """Test emission checks and pass-through."""

    def test_unknown_type_raises_type_error(self, suggestions_on):
        # Arrange
        emitter = ValidatingEventEmitter(EventEmitter(), ["honk"])

        # Act & Assert
        with pytest.raises(TypeError) as exc_info:
            emitter.emit("quack")

        assert str(exc_info.value) == 'Unknown event type "quack". Known event types: honk.'
        assert isinstance(exc_info.value, UnknownEventTypeError)

    def test_mistyped_type_gets_suggestion(self, suggestions_on):
        # Arrange
        emitter = ValidatingEventEmitter(EventEmitter(), ["vroom"])

        # Act & Assert
        with pytest.raises(UnknownEventTypeError) as exc_info:
            emitter.emit("vrooom")

        assert str(exc_info.value) == (
            'Unknown event type "vrooom". Did you mean "vroom"? Known event types: vroom.'
        )
        assert exc_info.value.suggestion == "vroom"

    def test_no_suggestion_when_disabled(self, suggestions_off):
        # Arrange
        emitter = ValidatingEventEmitter(EventEmitter(), ["honk", "vroom"])

        # Act & Assert
        with pytest.raises(UnknownEventTypeError) as exc_info:
            emitter.emit("bonk")

        assert str(exc_info.value) == (
            'Unknown event type "bonk". Known event types: honk, vroom.'
        )

    def test_known_type_is_emitted(self, listener):
        # Arrange
        emitter = ValidatingEventEmitter(EventEmitter(), ["honk"])
        emitter.add_listener("honk", listener)

        # Act
        emitter.emit("honk", "beep")

        # Assert
        listener.assert_called_once_with("beep")

    def test_rejected_emit_does_not_reach_listeners(self, listener):
        # Arrange
        emitter = ValidatingEventEmitter(EventEmitter(), ["honk"])
        emitter.add_listener("bonk", listener)

        # Act
        with pytest.raises(UnknownEventTypeError):
            emitter.emit("bonk")

        # Assert
        listener.assert_not_called()

    def test_emit_and_hold_is_validated(self, suggestions_on):
        # Arrange
        emitter = create_event_emitter(["vroom"])

        # Act & Assert
        with pytest.raises(UnknownEventTypeError, match='Did you mean "vroom"'):
            emitter.emit_and_hold("vrooom")

        assert emitter.holder.held_count() == 0

    def test_emit_and_hold_requires_holding_emitter(self):
        # Arrange
        emitter = ValidatingEventEmitter(EventEmitter(), ["honk"])

        # Act & Assert
        with pytest.raises(AttributeError, match="emit_and_hold"):
            emitter.emit_and_hold("honk")

    def test_other_operations_pass_through(self, listener):
        # Arrange
        emitter = create_event_emitter(["ready"])
        emitter.emit_and_hold("ready", 1)

        # Act
        subscription = emitter.add_retroactive_listener("ready", listener)
        emitter.release_held_event_type("ready")
        subscription.release()

        # Assert
        listener.assert_called_once_with(1)
        assert emitter.listeners("ready") == []
        assert emitter.holder.held_count() == 0

    def test_allowed_types_and_extension(self):
        # Arrange
        emitter = ValidatingEventEmitter(EventEmitter(), ["a", "b", "a"])

        # Act
        emitter.extend_event_types(["c", "b"])

        # Assert
        assert emitter.allowed_event_types == ("a", "b", "c")
        assert emitter.allows("c") is True
        assert emitter.allows("d") is False

    def test_rejection_is_logged(self, caplog):
        # Arrange
        emitter = ValidatingEventEmitter(EventEmitter(), ["honk"])

        # Act
        with caplog.at_level("WARNING", logger="retroemit.core.event.validation"):
            with pytest.raises(UnknownEventTypeError):
                emitter.emit("quack")

        # Assert
        assert any(
            getattr(record, "event_type", None) == "quack" for record in caplog.records
        )
