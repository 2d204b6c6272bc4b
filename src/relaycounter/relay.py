"""BehaviorRelay — a single value that broadcasts changes and replays on subscribe.

accept() stores the value and pushes it to every subscriber, synchronously and
in subscription order. subscribe() calls the new callback with the current
value before returning, so late subscribers never wait for the next emission.

Notification iterates a snapshot of the subscriber list: callbacks may
subscribe, unsubscribe, or accept() again without corrupting the round.
Single writer: accept() is re-entrant but not safe across threads.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from relaycounter.disposable import Subscription

T = TypeVar("T")


class BehaviorRelay(Generic[T]):
    """Latest-value broadcast cell. The value is always defined."""

    __slots__ = ("_value", "_subscriptions", "_disposed")

    def __init__(self, value: T) -> None:
        self._value = value
        self._subscriptions: list[Subscription] = []
        self._disposed = False

    @property
    def value(self) -> T:
        return self._value

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def accept(self, value: T) -> None:
        """Store value and notify all live subscribers."""
        self._value = value
        if self._disposed:
            return
        for sub in list(self._subscriptions):
            sub._deliver(value)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        """Register callback, replay the current value to it, return its handle."""
        sub = Subscription(callback, self._remove)
        if self._disposed:
            sub.dispose()
            return sub
        self._subscriptions.append(sub)
        try:
            sub._deliver(self._value)
        except BaseException:
            sub.dispose()
            raise
        return sub

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription. Unknown or already-removed handles are ignored."""
        subscription.dispose()

    def _remove(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass  # already removed

    def dispose(self) -> None:
        """Release every subscription. No notification fires afterwards."""
        self._disposed = True
        subs, self._subscriptions = self._subscriptions, []
        for sub in subs:
            sub.dispose()

    def __repr__(self) -> str:
        return f"BehaviorRelay({self._value!r}, observers={len(self._subscriptions)})"
