"""
Subscription handle for retroemit emitters.

A Subscription is returned by every listener registration. It references
the registry that vended it, the event type and the slot key, and removes
exactly that registration when released.
"""

from __future__ import annotations

from typing import Optional, Protocol


class SubscriptionOwner(Protocol):
    def remove_subscription(self, subscription: "Subscription") -> None: ...


class Subscription:
    """
    Handle for one listener registration.

    `release()` is idempotent: the first call asks the owner to forget the
    slot and drops the owner reference, later calls do nothing.

    Examples
    --------
    >>> subscription = emitter.add_listener("click", on_click)
    >>> subscription.release()
    >>> subscription.release()  # no-op
    """

    __slots__ = ("_owner", "_event_type", "_key")

    def __init__(self, owner: SubscriptionOwner, event_type: str, key: int) -> None:
        self._owner: Optional[SubscriptionOwner] = owner
        self._event_type = event_type
        self._key = key

    @property
    def event_type(self) -> str:
        return self._event_type

    @property
    def key(self) -> int:
        return self._key

    @property
    def is_active(self) -> bool:
        """False once released through this handle."""
        return self._owner is not None

    def release(self) -> None:
        owner = self._owner
        if owner is not None:
            owner.remove_subscription(self)
            self._owner = None

    def __repr__(self) -> str:
        state = "active" if self.is_active else "released"
        return f"Subscription(event_type={self._event_type!r}, key={self._key}, {state})"
