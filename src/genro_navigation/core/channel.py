"""Subscriber-counted broadcast channel.

``BroadcastChannel`` delivers each published event synchronously to every
active subscription, in subscription order. When the last subscription is
cancelled the optional ``on_empty`` callback runs, which lets the owner drop
the channel and create a fresh one on the next subscribe.

Example::

    channel = BroadcastChannel()
    sub = channel.subscribe(print)
    channel.publish("hello")   # prints "hello"
    sub.cancel()
    channel.has_subscribers()  # False
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

__all__ = ["BroadcastChannel", "Subscription"]

E = TypeVar("E")


class Subscription(Generic[E]):
    """Handle returned by ``BroadcastChannel.subscribe``."""

    __slots__ = ("_channel", "callback", "active")

    def __init__(self, channel: BroadcastChannel[E], callback: Callable[[E], Any]) -> None:
        self._channel = channel
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        """Detach from the channel. Cancelling twice is a no-op."""
        if self.active:
            self.active = False
            self._channel.unsubscribe(self)


class BroadcastChannel(Generic[E]):
    """Fan-out of events to subscriber callbacks."""

    __slots__ = ("_subscriptions", "_on_empty")

    def __init__(self, on_empty: Callable[[], None] | None = None) -> None:
        self._subscriptions: list[Subscription[E]] = []
        self._on_empty = on_empty

    def subscribe(self, callback: Callable[[E], Any]) -> Subscription[E]:
        if not callable(callback):
            raise TypeError(f"Subscriber must be callable, got {type(callback).__name__}")
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription[E]) -> None:
        if subscription not in self._subscriptions:
            return
        subscription.active = False
        self._subscriptions.remove(subscription)
        if not self._subscriptions and self._on_empty is not None:
            self._on_empty()

    def has_subscribers(self) -> bool:
        return bool(self._subscriptions)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def publish(
        self, event: E, on_error: Callable[[Exception, E], Any] | None = None
    ) -> None:
        """Deliver ``event`` to every active subscription.

        Without ``on_error`` the first failing subscriber stops delivery and
        its exception propagates. With ``on_error`` each failure is reported
        there and the remaining subscribers still receive the event.
        """
        # Snapshot: callbacks may cancel their own subscription while running.
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            if on_error is None:
                subscription.callback(event)
                continue
            try:
                subscription.callback(event)
            except Exception as exc:
                on_error(exc, event)
