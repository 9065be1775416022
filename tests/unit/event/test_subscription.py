"""
Unit Tests for Subscription
===========================

Test Coverage
-------------
- release() delegates to the owner exactly once
- Read-only accessors and repr
"""

import pytest

from retroemit.core.event import Subscription


@pytest.mark.unit
@pytest.mark.event
class TestSubscription:
    """Test the subscription handle in isolation."""

    def test_release_asks_owner_to_remove(self, mocker):
        """The owner receives the subscription itself."""
        # Arrange
        owner = mocker.MagicMock()
        subscription = Subscription(owner, "type1", 7)

        # Act
        subscription.release()

        # Assert
        owner.remove_subscription.assert_called_once_with(subscription)

    def test_release_is_idempotent(self, mocker):
        """Only the first release reaches the owner."""
        # Arrange
        owner = mocker.MagicMock()
        subscription = Subscription(owner, "type1", 7)

        # Act
        subscription.release()
        subscription.release()

        # Assert
        assert owner.remove_subscription.call_count == 1
        assert subscription.is_active is False

    def test_accessors(self, mocker):
        # Arrange & Act
        subscription = Subscription(mocker.MagicMock(), "type1", 3)

        # Assert
        assert subscription.event_type == "type1"
        assert subscription.key == 3
        assert subscription.is_active is True
        assert "type1" in repr(subscription)
        assert "active" in repr(subscription)

    def test_emitter_vends_distinct_keys(self, emitter, listener):
        """Every registration gets its own key."""
        # Arrange & Act
        first = emitter.add_listener("type1", listener)
        second = emitter.add_listener("type1", listener)
        third = emitter.add_listener("type2", listener)

        # Assert
        assert len({first.key, second.key, third.key}) == 3
