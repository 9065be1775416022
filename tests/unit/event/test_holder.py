"""
Unit Tests for EventHolder
==========================

Test Coverage
-------------
- Holding and replaying events to a single listener
- Token-precise release, idempotent release, releasing a whole type
- The current-event cursor during (nested) replays
- Introspection and metrics

Testing Strategy
----------------
- AAA pattern (Arrange, Act, Assert)
- Listener doubles from pytest-mock
"""

import pytest

from retroemit.core.event import EventHolder, HeldEventToken
from retroemit.core.exceptions import InvariantViolation


# ============================================================================
# HOLD & REPLAY
# ============================================================================


@pytest.mark.unit
@pytest.mark.event
class TestHoldAndReplay:
    """Test retaining events and replaying them."""

    def test_replay_delivers_held_events_in_order(self, holder, listener, mocker):
        # Arrange
        holder.hold_event("type1", "a", 1)
        holder.hold_event("type1", "b", 2)

        # Act
        holder.emit_to_listener("type1", listener)

        # Assert
        assert listener.call_args_list == [mocker.call("a", 1), mocker.call("b", 2)]

    def test_replay_passes_context_first(self, holder, listener):
        # Arrange
        context = object()
        holder.hold_event("type1", "a")

        # Act
        holder.emit_to_listener("type1", listener, context)

        # Assert
        listener.assert_called_once_with(context, "a")

    def test_replay_of_unknown_type_is_noop(self, holder, listener):
        # Arrange & Act
        holder.emit_to_listener("unknown", listener)

        # Assert
        listener.assert_not_called()

    def test_replay_only_covers_matching_type(self, holder, listener):
        # Arrange
        holder.hold_event("type1", "a")
        holder.hold_event("type2", "b")

        # Act
        holder.emit_to_listener("type2", listener)

        # Assert
        listener.assert_called_once_with("b")

    def test_events_held_during_replay_are_not_replayed_in_same_pass(self, holder):
        """Only records present when the replay started are visited."""
        # Arrange
        seen = []

        def listener(value):
            seen.append(value)
            if value == "a":
                holder.hold_event("type1", "late")

        holder.hold_event("type1", "a")

        # Act
        holder.emit_to_listener("type1", listener)

        # Assert
        assert seen == ["a"]
        assert holder.held_events("type1") == [("a",), ("late",)]

    def test_hold_returns_token(self, holder):
        # Arrange & Act
        token = holder.hold_event("type1")

        # Assert
        assert isinstance(token, HeldEventToken)
        assert token.event_type == "type1"


# ============================================================================
# RELEASE
# ============================================================================


@pytest.mark.unit
@pytest.mark.event
class TestRelease:
    """Test the release operations."""

    def test_release_event_by_token_is_precise(self, holder, listener, mocker):
        """Releasing B from [A, B, C] replays exactly A then C."""
        # Arrange
        holder.hold_event("type1", "A")
        token_b = holder.hold_event("type1", "B")
        holder.hold_event("type1", "C")

        # Act
        holder.release_event(token_b)
        holder.emit_to_listener("type1", listener)

        # Assert
        assert listener.call_args_list == [mocker.call("A"), mocker.call("C")]

    def test_release_event_twice_is_noop(self, holder):
        # Arrange
        token = holder.hold_event("type1", "A")
        holder.hold_event("type1", "B")

        # Act
        holder.release_event(token)
        holder.release_event(token)

        # Assert
        assert holder.held_events("type1") == [("B",)]

    def test_release_unknown_token_is_noop(self, holder):
        # Arrange
        holder.hold_event("type1", "A")

        # Act
        holder.release_event(HeldEventToken(event_type="type1", key=9999))
        holder.release_event(HeldEventToken(event_type="other", key=0))

        # Assert
        assert holder.held_count() == 1

    def test_release_event_type_discards_all_records(self, holder, listener):
        # Arrange
        holder.hold_event("type1", "A")
        holder.hold_event("type1", "B")
        holder.hold_event("type2", "C")

        # Act
        holder.release_event_type("type1")
        holder.emit_to_listener("type1", listener)

        # Assert
        listener.assert_not_called()
        assert holder.held_count() == 1

    def test_stale_token_does_not_hit_newer_record(self, holder):
        """Keys are never reused after a type is cleared."""
        # Arrange
        stale = holder.hold_event("type1", "old")
        holder.release_event_type("type1")
        holder.hold_event("type1", "new")

        # Act
        holder.release_event(stale)

        # Assert
        assert holder.held_events("type1") == [("new",)]

    def test_release_current_event_releases_record_being_replayed(self, holder):
        # Arrange
        holder.hold_event("type1", "A")
        holder.hold_event("type1", "B")

        def listener(value):
            if value == "A":
                holder.release_current_event()

        # Act
        holder.emit_to_listener("type1", listener)

        # Assert
        assert holder.held_events("type1") == [("B",)]

    def test_release_current_event_outside_replay_raises(self, holder):
        # Arrange & Act & Assert
        with pytest.raises(InvariantViolation) as exc_info:
            holder.release_current_event()

        assert "there is no current event" in str(exc_info.value)

    def test_release_event_type_during_replay_stops_delivery(self, holder, mocker):
        """Records of a type cleared mid-replay are not delivered."""
        # Arrange
        holder.hold_event("type1", "A")
        holder.hold_event("type1", "B")
        listener = mocker.MagicMock(
            side_effect=lambda value: holder.release_event_type("type1")
        )

        # Act
        holder.emit_to_listener("type1", listener)

        # Assert
        listener.assert_called_once_with("A")

    def test_nested_replays_release_innermost_current_event(self, holder):
        """The cursor is a stack: each level releases its own record."""
        # Arrange
        holder.hold_event("outer", "O")
        holder.hold_event("inner", "I")

        def inner_listener(value):
            holder.release_current_event()

        def outer_listener(value):
            holder.emit_to_listener("inner", inner_listener)
            assert holder.held_events("outer") == [("O",)]
            holder.release_current_event()

        # Act
        holder.emit_to_listener("outer", outer_listener)

        # Assert
        assert holder.held_count() == 0
        assert holder.is_replaying is False

    def test_cursor_restored_when_listener_raises(self, holder, mocker):
        # Arrange
        holder.hold_event("type1", "A")
        listener = mocker.MagicMock(side_effect=ValueError("boom"))

        # Act
        with pytest.raises(ValueError):
            holder.emit_to_listener("type1", listener)

        # Assert
        assert holder.is_replaying is False
        assert holder.get_metrics().listener_errors == {"type1": 1}


# ============================================================================
# METRICS
# ============================================================================


@pytest.mark.unit
@pytest.mark.event
class TestHolderMetrics:
    """Test hold/release accounting."""

    def test_holds_and_releases_are_counted(self, holder):
        # Arrange
        token = holder.hold_event("type1", "A")
        holder.hold_event("type1", "B")
        holder.hold_event("type1", "C")

        # Act
        holder.release_event(token)
        holder.release_event(token)
        holder.release_event_type("type1")
        metrics = holder.get_metrics()

        # Assert
        assert metrics.events_held == {"type1": 3}
        assert metrics.events_released == {"type1": 3}

    def test_metrics_disabled(self):
        # Arrange
        holder = EventHolder(enable_metrics=False)

        # Act
        holder.hold_event("type1")

        # Assert
        assert holder.get_metrics() is None
