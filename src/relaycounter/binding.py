"""RelayBinding — keep a render function in sync with a BehaviorRelay.

A binding holds the relay's latest value, subscribes at most once, and calls
render(value) on every emission. Emissions that arrive on a thread other than
the one that called bind() are handed to marshal (e.g. app.call_from_thread)
so rendering always happens on the UI context.

The binding is two-way: assigning binding.value accepts the new value into
the relay, so every other subscriber sees the write.

Lifecycle is explicit: bind() to attach, dispose() to detach. Both are
idempotent, and a binding disposed before bind() never attaches.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

from relaycounter.disposable import DisposeBag, Subscription
from relaycounter.relay import BehaviorRelay

T = TypeVar("T")


class RelayBinding(Generic[T]):
    """Live-updating view of a relay's value, with manual lifecycle."""

    __slots__ = (
        "_relay",
        "_render",
        "_marshal",
        "_value",
        "_subscription",
        "_is_subscribed",
        "_disposed",
        "_bound_thread",
    )

    def __init__(
        self,
        relay: BehaviorRelay[T],
        render: Callable[[T], None],
        *,
        marshal: Callable[..., object] | None = None,
    ) -> None:
        self._relay = relay
        self._render = render
        self._marshal = marshal
        self._value = relay.value
        self._subscription: Subscription | None = None
        self._is_subscribed = False
        self._disposed = False
        self._bound_thread: int | None = None

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        """Write through: store locally, then push into the relay for everyone."""
        self._value = new_value
        self._relay.accept(new_value)

    @property
    def is_subscribed(self) -> bool:
        return self._is_subscribed and not self._disposed

    @property
    def disposed(self) -> bool:
        return self._disposed

    def bind(self) -> RelayBinding[T]:
        """Subscribe to the relay. Repeated and re-entrant calls are no-ops."""
        if self._disposed or self._is_subscribed:
            return self
        # Flag first: the relay replays synchronously and render may call bind().
        self._is_subscribed = True
        self._bound_thread = threading.get_ident()
        subscription = self._relay.subscribe(self._on_next)
        if self._disposed:
            # render() disposed us during the replay
            subscription.dispose()
        else:
            self._subscription = subscription
        return self

    def _on_next(self, value: T) -> None:
        if self._marshal is not None and threading.get_ident() != self._bound_thread:
            self._marshal(self._apply, value)
        else:
            self._apply(value)

    def _apply(self, value: T) -> None:
        if self._disposed:
            return
        self._value = value
        self._render(value)

    def dispose(self) -> None:
        """Detach from the relay. Pending marshaled updates are dropped."""
        if self._disposed:
            return
        self._disposed = True
        if self._subscription is not None:
            self._subscription.dispose()
            self._subscription = None

    def __repr__(self) -> str:
        if self._disposed:
            state = "disposed"
        elif self._is_subscribed:
            state = "bound"
        else:
            state = "unbound"
        return f"RelayBinding({self._value!r}, {state})"


def bind(
    relay: BehaviorRelay[T],
    render: Callable[[T], None],
    *,
    marshal: Callable[..., object] | None = None,
    bag: DisposeBag | None = None,
) -> RelayBinding[T]:
    """Create a binding, register it in bag (if given), and attach it.

    Registration happens before attaching, so a bag that is already disposed
    releases the binding without it ever subscribing.

    Usage:
        bag = DisposeBag()
        bind(controller.counter, lambda v: label.update(str(v)), bag=bag)
        ...
        bag.dispose()   # view teardown
    """
    binding = RelayBinding(relay, render, marshal=marshal)
    if bag is not None:
        bag.add(binding)
    return binding.bind()
