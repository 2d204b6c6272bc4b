"""Textual integration for relaycounter. Opt-in — requires textual.

Guard + NoMatches + thread-marshal are enforced in bind() here, not at
callsites. Textual coupling lives in this module; the core stays agnostic.
Pause state has a single owner (this module), keyed by id(app): an id is
present exactly while inside a pause() context.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, TypeVar

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widget import Widget
from textual.widgets import Button, Footer, Static

from relaycounter.binding import RelayBinding
from relaycounter.binding import bind as _bind
from relaycounter.controller import CounterController
from relaycounter.disposable import DisposeBag
from relaycounter.relay import BehaviorRelay
from relaycounter.scheduler import TimerHandle

T = TypeVar("T")

_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded renders during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def bind(
    app,
    relay: BehaviorRelay[T],
    render: Callable[[T], None],
    *,
    bag: DisposeBag | None = None,
) -> RelayBinding[T]:
    """bind() that safely bridges a relay to Textual widgets.

    Skips rendering while the app is paused or not running, swallows
    NoMatches from widget queries, and marshals emissions from other
    threads via call_from_thread.
    """

    def _guarded(value: T) -> None:
        if not is_safe(app):
            return
        try:
            render(value)
        except NoMatches:
            pass

    return _bind(relay, _guarded, marshal=app.call_from_thread, bag=bag)


class _TextualTimerHandle(TimerHandle):
    __slots__ = ("_timer",)

    def __init__(self, app, interval: float, callback: Callable[[], None]) -> None:
        super().__init__(callback)
        self._timer = app.set_interval(interval, self.fire)

    def cancel(self) -> None:
        super().cancel()
        self._timer.stop()

    dispose = cancel


class TextualScheduler:
    """Ticks on the app's event loop via set_interval, so ticks run on the UI context."""

    def __init__(self, app) -> None:
        self._app = app

    def schedule_periodic(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        return _TextualTimerHandle(self._app, interval, callback)


class CounterView(Widget):
    """Counter display with Start/Stop and Reset.

    Bindings live in the view's own DisposeBag and are released on unmount,
    which also stops the counter.
    """

    DEFAULT_CSS = """
    CounterView {
        height: auto;
        align: center middle;
    }
    CounterView #value {
        width: 100%;
        text-align: center;
        text-style: bold;
        padding: 1;
    }
    CounterView #controls {
        height: auto;
        align: center middle;
    }
    CounterView Button {
        margin: 0 2;
    }
    """

    def __init__(self, controller: CounterController, **kwargs) -> None:
        super().__init__(**kwargs)
        self.controller = controller
        self.bag = DisposeBag()
        self.value_binding: RelayBinding[int] | None = None
        self.running_binding: RelayBinding[bool] | None = None

    def compose(self) -> ComposeResult:
        running = self.controller.is_running
        yield Static(str(self.controller.value), id="value")
        with Horizontal(id="controls"):
            yield Button(
                "Stop" if running else "Start",
                id="toggle",
                variant="error" if running else "success",
            )
            yield Button("Reset", id="reset", variant="primary", disabled=running)

    def on_mount(self) -> None:
        self.value_binding = bind(self.app, self.controller.counter, self._render_value, bag=self.bag)
        self.running_binding = bind(self.app, self.controller.running, self._render_running, bag=self.bag)

    def on_unmount(self) -> None:
        self.bag.dispose()
        self.controller.stop()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "toggle":
            self.controller.toggle()
        elif event.button.id == "reset":
            self.controller.reset()
        else:
            return
        event.stop()

    def _render_value(self, value: int) -> None:
        self.query_one("#value", Static).update(str(value))

    def _render_running(self, running: bool) -> None:
        toggle = self.query_one("#toggle", Button)
        toggle.label = "Stop" if running else "Start"
        toggle.variant = "error" if running else "success"
        self.query_one("#reset", Button).disabled = running


class ParentApp(App):
    """Parent view: mounts/unmounts the counter and re-renders on its own.

    The controller belongs to the app, so the count survives hiding the
    counter view. Hiding stops the counter (the view's unmount does that).
    """

    TITLE = "relaycounter"

    CSS = """
    Screen {
        align: center middle;
    }
    #counter-slot {
        height: auto;
    }
    #parent-controls {
        height: auto;
        align: center middle;
    }
    #parent-updates {
        width: 100%;
        text-align: center;
        text-style: bold;
        padding: 1;
    }
    """

    BINDINGS = [
        ("s", "toggle_counter_view", "Show/Hide"),
        ("u", "update_parent", "Update parent"),
        ("t", "toggle_counter", "Start/Stop"),
        ("r", "reset_counter", "Reset"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, controller: CounterController | None = None) -> None:
        super().__init__()
        if controller is None:
            controller = CounterController(TextualScheduler(self))
        self.controller = controller
        self.parent_updates: BehaviorRelay[int] = BehaviorRelay(0)
        self.bag = DisposeBag()
        self.counter_view: CounterView | None = None

    def compose(self) -> ComposeResult:
        yield Vertical(id="counter-slot")
        with Horizontal(id="parent-controls"):
            yield Button("Show Counter", id="show", variant="warning")
            yield Button("Update Parent View", id="update", variant="primary")
        yield Static(self._updates_text(self.parent_updates.value), id="parent-updates")
        yield Footer()

    def on_mount(self) -> None:
        bind(self, self.parent_updates, self._render_updates, bag=self.bag)

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "show":
            await self.action_toggle_counter_view()
        elif event.button.id == "update":
            self.action_update_parent()

    async def action_toggle_counter_view(self) -> None:
        if self.counter_view is None:
            self.counter_view = CounterView(self.controller, id="counter")
            await self.query_one("#counter-slot").mount(self.counter_view)
        else:
            view, self.counter_view = self.counter_view, None
            with pause(self):
                await view.remove()
        self.query_one("#show", Button).label = (
            "Hide Counter" if self.counter_view is not None else "Show Counter"
        )

    def action_update_parent(self) -> None:
        self.parent_updates.accept(self.parent_updates.value + 1)

    def action_toggle_counter(self) -> None:
        if self.counter_view is not None:
            self.controller.toggle()

    def action_reset_counter(self) -> None:
        # Mirrors the Reset button, which is disabled while running.
        if self.counter_view is not None and not self.controller.is_running:
            self.controller.reset()

    def release(self) -> None:
        """Tear down app-owned bindings and the controller."""
        self.bag.dispose()
        self.controller.dispose()

    def _render_updates(self, count: int) -> None:
        self.query_one("#parent-updates", Static).update(self._updates_text(count))

    @staticmethod
    def _updates_text(count: int) -> str:
        return f"Parent View Updates: {count}"
