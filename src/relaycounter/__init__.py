"""relaycounter: a relay-driven periodic counter with explicit subscription lifecycles."""

from importlib.metadata import version as _version

__version__ = _version("relaycounter")

from relaycounter.disposable import Disposable, DisposeBag, Subscription
from relaycounter.relay import BehaviorRelay
from relaycounter.scheduler import ThreadScheduler, TimerHandle, VirtualScheduler
from relaycounter.controller import CounterController
from relaycounter.binding import RelayBinding, bind
# textual integration NOT auto-imported — opt-in only

__all__ = [
    "BehaviorRelay",
    "Subscription",
    "Disposable",
    "DisposeBag",
    "TimerHandle",
    "ThreadScheduler",
    "VirtualScheduler",
    "CounterController",
    "RelayBinding",
    "bind",
]
