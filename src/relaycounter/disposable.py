"""Disposables — subscription handles and the bags that release them together.

A Subscription is returned by BehaviorRelay.subscribe(). A DisposeBag groups
disposables owned by one view or controller so they can all be released at a
single teardown point. Nothing here is global: every bag has exactly one owner.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, Union, runtime_checkable


@runtime_checkable
class Disposable(Protocol):
    def dispose(self) -> None: ...


DisposableLike = Union[Disposable, Callable[[], None]]


def _dispose_one(item: DisposableLike) -> None:
    if isinstance(item, Disposable):
        item.dispose()
    else:
        item()


class Subscription:
    """Handle for one registered callback. dispose() is idempotent."""

    __slots__ = ("_callback", "_detach", "_disposed")

    def __init__(
        self,
        callback: Callable[[Any], None],
        detach: Callable[[Subscription], None],
    ) -> None:
        self._callback = callback
        self._detach = detach
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _deliver(self, value) -> None:
        if not self._disposed:
            self._callback(value)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._detach(self)

    def disposed_by(self, bag: DisposeBag) -> Subscription:
        """Add to bag and return self, for chaining off subscribe()."""
        bag.add(self)
        return self

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Subscription({state})"


class DisposeBag:
    """Owns disposables and releases them together.

    Once the bag is disposed, anything added to it is disposed immediately,
    so a late attach can never outlive an early detach.

    Usage:
        with DisposeBag() as bag:
            relay.subscribe(render).disposed_by(bag)
            ...
        # every subscription released here, on any exit path
    """

    def __init__(self) -> None:
        self._items: list[DisposableLike] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def add(self, item: DisposableLike) -> DisposableLike:
        if self._disposed:
            _dispose_one(item)
        else:
            self._items.append(item)
        return item

    def dispose(self) -> None:
        """Release everything in the bag. Safe to call more than once.

        Every item is released even if an earlier one raises; the first
        error is re-raised once the bag is empty.
        """
        self._disposed = True
        items, self._items = self._items, []
        first_error: Exception | None = None
        for item in items:
            try:
                _dispose_one(item)
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def __len__(self) -> int:
        return len(self._items)

    def __enter__(self) -> DisposeBag:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._items)} items"
        return f"DisposeBag({state})"
