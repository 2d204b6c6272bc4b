"""Tick sources — cancellable periodic timers.

A scheduler exposes schedule_periodic(interval, callback) -> TimerHandle.
The first fire happens one interval after scheduling; callers that want an
immediate tick call handle.fire() themselves.

fire() checks the cancel flag on whatever context runs it, and no lock is
held while the callback runs. Once cancel() returns no new fire starts, and
a fire marshaled onto the UI context is dropped there if the UI context
cancelled first.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from typing import Callable

logger = logging.getLogger("relaycounter.scheduler")

Marshal = Callable[..., object]

# Tolerance for due-time comparisons; periods like 0.1 are not exact in binary.
_EPSILON = 1e-9


class TimerHandle:
    """Cancellable handle for one periodic tick source."""

    __slots__ = ("_callback", "_cancelled")

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def fire(self) -> None:
        """Run the callback unless cancelled."""
        if self._cancelled.is_set():
            return
        self._callback()

    def cancel(self) -> None:
        self._cancelled.set()

    dispose = cancel

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"TimerHandle({state})"


class ThreadScheduler:
    """One daemon thread per tick source, delivering ticks through marshal.

    marshal hands each fire to the UI context (e.g. app.call_from_thread),
    so ticks, reset() and cancellation all happen on one thread. Without
    marshal, callbacks run on the timer thread and the caller must not touch
    the controller from any other thread.
    """

    def __init__(self, marshal: Marshal | None = None) -> None:
        self._marshal = marshal

    def schedule_periodic(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback)
        threading.Thread(target=self._loop, args=(handle, interval), daemon=True).start()
        return handle

    def _loop(self, handle: TimerHandle, interval: float) -> None:
        # Event.wait returns True as soon as the handle is cancelled.
        while not handle._cancelled.wait(interval):
            try:
                if self._marshal is not None:
                    self._marshal(handle.fire)
                else:
                    handle.fire()
            except Exception:
                logger.exception("Tick callback failed")


class VirtualScheduler:
    """Deterministic scheduler driven by advance(). Nothing runs on its own.

    Due times are computed as start + n * interval, so repeated advances
    do not accumulate drift.

    Usage:
        scheduler = VirtualScheduler()
        controller = CounterController(scheduler)
        controller.start()       # immediate tick -> 1
        scheduler.advance(2.0)   # two more ticks -> 3
    """

    def __init__(self) -> None:
        self.now = 0.0
        # (due, seq, start, n, interval, handle)
        self._queue: list[tuple[float, int, float, int, float, TimerHandle]] = []
        self._seq = itertools.count()

    @property
    def active_timers(self) -> int:
        return sum(1 for *_, handle in self._queue if not handle.cancelled)

    def schedule_periodic(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval!r}")
        handle = TimerHandle(callback)
        self._push(self.now, 1, interval, handle)
        return handle

    def _push(self, start: float, n: int, interval: float, handle: TimerHandle) -> None:
        due = start + n * interval
        heapq.heappush(self._queue, (due, next(self._seq), start, n, interval, handle))

    def advance(self, seconds: float) -> None:
        """Move virtual time forward, firing every tick that falls due."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + _EPSILON:
            due, _, start, n, interval, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = max(self.now, due)
            self._push(start, n + 1, interval, handle)
            handle.fire()
        self.now = max(self.now, target)
