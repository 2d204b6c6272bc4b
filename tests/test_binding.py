"""Tests for RelayBinding — guarded one-time subscription with explicit teardown."""

import threading

from relaycounter import BehaviorRelay, CounterController, DisposeBag, RelayBinding, VirtualScheduler, bind


class TestLifecycle:
    def test_value_reflects_relay_before_bind(self):
        relay = BehaviorRelay(4)
        binding = RelayBinding(relay, lambda v: None)
        assert binding.value == 4
        assert not binding.is_subscribed

    def test_bind_renders_current_then_updates(self):
        relay = BehaviorRelay(1)
        rendered = []
        binding = RelayBinding(relay, rendered.append).bind()
        relay.accept(2)
        assert rendered == [1, 2]
        assert binding.value == 2

    def test_repeated_bind_subscribes_once(self):
        relay = BehaviorRelay(0)
        rendered = []
        binding = RelayBinding(relay, rendered.append)
        binding.bind()
        binding.bind()
        binding.bind()
        assert relay.observer_count == 1
        relay.accept(1)
        assert rendered == [0, 1]

    def test_reentrant_bind_from_render(self):
        relay = BehaviorRelay(0)
        holder = {}

        def render(v):
            holder["b"].bind()

        holder["b"] = RelayBinding(relay, render)
        holder["b"].bind()
        assert relay.observer_count == 1

    def test_dispose_detaches(self):
        relay = BehaviorRelay(0)
        rendered = []
        binding = bind(relay, rendered.append)
        binding.dispose()
        relay.accept(1)
        assert rendered == [0]
        assert binding.disposed
        assert relay.observer_count == 0

    def test_dispose_idempotent(self):
        binding = bind(BehaviorRelay(0), lambda v: None)
        binding.dispose()
        binding.dispose()  # should not raise

    def test_dispose_before_bind_never_attaches(self):
        relay = BehaviorRelay(0)
        rendered = []
        binding = RelayBinding(relay, rendered.append)
        binding.dispose()
        binding.bind()
        assert rendered == []
        assert relay.observer_count == 0

    def test_dispose_from_render_during_replay(self):
        relay = BehaviorRelay(0)
        holder = {}

        def render(v):
            holder["b"].dispose()

        holder["b"] = RelayBinding(relay, render)
        holder["b"].bind()
        assert relay.observer_count == 0


class TestWriteThrough:
    def test_assignment_reaches_other_subscribers(self):
        relay = BehaviorRelay(0)
        others = []
        relay.subscribe(others.append)
        rendered = []
        binding = bind(relay, rendered.append)
        binding.value = 7
        assert relay.value == 7
        assert others == [0, 7]
        assert rendered == [0, 7]
        assert binding.value == 7

    def test_assignment_before_bind(self):
        relay = BehaviorRelay(0)
        binding = RelayBinding(relay, lambda v: None)
        binding.value = 3
        assert relay.value == 3
        assert binding.value == 3
        assert relay.observer_count == 0

    def test_counter_reset_through_binding(self):
        scheduler = VirtualScheduler()
        controller = CounterController(scheduler)
        binding = bind(controller.counter, lambda v: None)
        controller.start()
        scheduler.advance(1.0)
        binding.value = 0
        scheduler.advance(1.0)
        assert controller.value == 1


class TestBag:
    def test_bag_teardown_releases_binding(self):
        relay = BehaviorRelay(0)
        rendered = []
        bag = DisposeBag()
        binding = bind(relay, rendered.append, bag=bag)
        bag.dispose()
        relay.accept(1)
        assert rendered == [0]
        assert binding.disposed

    def test_disposed_bag_releases_before_subscribing(self):
        relay = BehaviorRelay(0)
        rendered = []
        bag = DisposeBag()
        bag.dispose()
        binding = bind(relay, rendered.append, bag=bag)
        assert rendered == []
        assert binding.disposed
        assert relay.observer_count == 0


class TestMarshal:
    def test_same_thread_is_direct(self):
        relay = BehaviorRelay(0)
        marshaled = []
        rendered = []
        bind(relay, rendered.append, marshal=lambda fn, *a: marshaled.append(a))
        relay.accept(1)
        assert rendered == [0, 1]
        assert marshaled == []

    def test_other_thread_is_marshaled(self):
        relay = BehaviorRelay(0)
        pending = []
        rendered = []
        bind(relay, rendered.append, marshal=lambda fn, *a: pending.append((fn, a)))

        t = threading.Thread(target=relay.accept, args=(5,))
        t.start()
        t.join()

        assert rendered == [0]
        assert len(pending) == 1
        fn, args = pending[0]
        fn(*args)  # the UI context drains its queue
        assert rendered == [0, 5]

    def test_pending_update_dropped_after_dispose(self):
        relay = BehaviorRelay(0)
        pending = []
        rendered = []
        binding = bind(relay, rendered.append, marshal=lambda fn, *a: pending.append((fn, a)))

        t = threading.Thread(target=relay.accept, args=(5,))
        t.start()
        t.join()

        binding.dispose()
        fn, args = pending[0]
        fn(*args)
        assert rendered == [0]
        assert binding.value == 0


class TestWithController:
    def test_binding_follows_counter(self):
        scheduler = VirtualScheduler()
        controller = CounterController(scheduler)
        rendered = []
        binding = bind(controller.counter, rendered.append)
        controller.start()
        scheduler.advance(2.0)
        controller.stop()
        controller.reset()
        assert rendered == [0, 1, 2, 3, 0]
        assert binding.value == 0
