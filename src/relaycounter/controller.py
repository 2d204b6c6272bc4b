"""CounterController — a counter that ticks once per period while running.

Two states, Stopped and Running. The timer handle exists exactly while
running, so is_running is derived from it rather than tracked separately.
The value lives in a BehaviorRelay; views observe that relay, never the
controller's internals.
"""

from __future__ import annotations

import logging

from relaycounter.relay import BehaviorRelay
from relaycounter.scheduler import TimerHandle

logger = logging.getLogger("relaycounter.controller")


class CounterController:
    """Start/stop/toggle/reset a periodic counter.

    The scheduler must deliver ticks on the context that calls start/stop/
    reset: TextualScheduler under Textual, ThreadScheduler(marshal=...) with
    another UI loop, VirtualScheduler in tests.

    Usage:
        controller = CounterController(VirtualScheduler())
        controller.counter.subscribe(print)   # prints 0
        controller.start()                    # prints 1 immediately
    """

    def __init__(self, scheduler, *, period: float = 1.0) -> None:
        self._scheduler = scheduler
        self._period = period
        self._timer: TimerHandle | None = None
        self.counter: BehaviorRelay[int] = BehaviorRelay(0)
        self.running: BehaviorRelay[bool] = BehaviorRelay(False)

    @property
    def value(self) -> int:
        return self.counter.value

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        """Begin ticking. The first tick fires immediately. No-op if running."""
        if self._timer is not None:
            logger.debug("start() ignored: already running")
            return
        timer = self._scheduler.schedule_periodic(self._period, self._tick)
        self._timer = timer
        logger.info("Counter started at %d (period %.3fs)", self.value, self._period)
        self.running.accept(True)
        timer.fire()

    def stop(self) -> None:
        """Cancel the tick source. No-op if stopped."""
        timer = self._timer
        if timer is None:
            logger.debug("stop() ignored: not running")
            return
        self._timer = None
        timer.cancel()
        logger.info("Counter stopped at %d", self.value)
        self.running.accept(False)

    def toggle(self) -> None:
        if self._timer is not None:
            self.stop()
        else:
            self.start()

    def reset(self) -> None:
        """Emit 0. Leaves the run state and tick cadence untouched."""
        logger.info("Counter reset from %d", self.value)
        self.counter.accept(0)

    def dispose(self) -> None:
        """Stop ticking and release every subscriber of both relays."""
        self.stop()
        self.counter.dispose()
        self.running.dispose()

    def _tick(self) -> None:
        if self._timer is None:
            return
        self.counter.accept(self.counter.value + 1)

    def __repr__(self) -> str:
        state = "running" if self._timer is not None else "stopped"
        return f"CounterController({self.value}, {state})"
