"""
Tests for Dispatcher: one outcome per item, close-after-drain, failure capture.
"""
import threading
import time

import pytest

from core.orchestration.dispatcher import Dispatcher
from core.orchestration.reassembler import Reassembler
from core.shared.types import Outcome, WorkItem, make_work_items


class ScriptedOrderExecutor:
    """
    Completes items in a scripted order.

    Each item waits until the consumer has received the item scheduled
    before it, so the arrival order on the stream is exactly ``order``.
    """

    def __init__(self, order, failures=(), timeout=5.0):
        self.order = list(order)
        self.failures = set(failures)
        self.timeout = timeout
        self._received = {i: threading.Event() for i in self.order}

    def mark_received(self, outcome):
        self._received[outcome.index].set()

    def __call__(self, item):
        pos = self.order.index(item.index)
        if pos > 0 and not self._received[self.order[pos - 1]].wait(self.timeout):
            raise RuntimeError("previous item never arrived")
        duration = 0.01 * (item.index + 1)
        if item.index in self.failures:
            return Outcome.failed(item, f"scripted failure [{item.payload}]", duration)
        return Outcome.success(item, f"value-{item.index}", duration)


def _drain(stream, on_arrival=None):
    received = []
    for outcome in stream:
        received.append(outcome)
        if on_arrival is not None:
            on_arrival(outcome)
    return received


class TestDispatch:
    """Tests for Dispatcher.dispatch()."""

    def test_every_item_produces_exactly_one_outcome(self):
        items = make_work_items(f"req-{i}" for i in range(20))
        stream = Dispatcher(lambda item: Outcome.success(item, item.payload, 0.0)).dispatch(items)

        received = _drain(stream)

        assert len(received) == 20
        assert sorted(o.index for o in received) == list(range(20))
        assert stream.closed

    def test_arrival_order_follows_completion(self):
        executor = ScriptedOrderExecutor(order=[2, 0, 1])
        stream = Dispatcher(executor).dispatch(make_work_items(["a", "b", "c"]))

        received = _drain(stream, executor.mark_received)

        assert [o.index for o in received] == [2, 0, 1]

    def test_empty_dispatch_closes_immediately(self):
        stream = Dispatcher(lambda item: pytest.fail("executor must not run")).dispatch([])

        assert stream.expected == 0
        assert list(stream) == []
        assert stream.closed
        assert stream.wait_closed(timeout=0)

    def test_single_item(self):
        stream = Dispatcher(lambda item: Outcome.success(item, "only", 0.0)).dispatch(
            [WorkItem(0, "x")]
        )
        received = _drain(stream)
        assert [o.index for o in received] == [0]

    def test_dispatch_returns_before_work_finishes(self):
        release = threading.Event()

        def blocking(item):
            release.wait(5)
            return Outcome.success(item, None, 0.0)

        stream = Dispatcher(blocking).dispatch(make_work_items(range(5)))
        assert stream.state == "dispatching"
        assert not stream.wait_closed(timeout=0.05)

        release.set()
        assert len(_drain(stream)) == 5
        assert stream.state == "closed"

    def test_all_items_launched_without_waiting(self):
        """Unbounded fan-out: every executor call is in flight at once."""
        n = 8
        barrier = threading.Barrier(n, timeout=5)

        def rendezvous(item):
            barrier.wait()
            return Outcome.success(item, None, 0.0)

        stream = Dispatcher(rendezvous).dispatch(make_work_items(range(n)))
        received = _drain(stream)

        assert len(received) == n
        assert all(o.ok for o in received)

    def test_non_dense_indices_raise(self):
        dispatcher = Dispatcher(lambda item: Outcome.success(item, None, 0.0))
        with pytest.raises(ValueError, match="exactly 0..1"):
            dispatcher.dispatch([WorkItem(0, "a"), WorkItem(2, "b")])
        with pytest.raises(ValueError):
            dispatcher.dispatch([WorkItem(0, "a"), WorkItem(0, "b")])

    def test_invalid_settings_raise(self):
        with pytest.raises(ValueError):
            Dispatcher(lambda item: None, max_concurrency=0)
        with pytest.raises(ValueError):
            Dispatcher(lambda item: None, capacity_factor=0)


class TestCloseAfterDrain:
    """Stream closes only after every executor invocation returned."""

    def test_close_observed_after_all_executors_returned(self):
        returned = []
        lock = threading.Lock()

        def tracked(item):
            try:
                time.sleep(0.01 * (item.index % 4))
                return Outcome.success(item, None, 0.0)
            finally:
                with lock:
                    returned.append(item.index)

        stream = Dispatcher(tracked).dispatch(make_work_items(range(12)))
        received = _drain(stream)

        # The gate was already at zero when the sentinel was taken
        assert stream.closed
        assert stream.wait_closed(timeout=0)
        assert stream._gate.remaining == 0
        with lock:
            assert sorted(returned) == list(range(12))
        assert len(received) == 12

    def test_slow_straggler_is_not_lost(self):
        def straggler(item):
            if item.index == 0:
                time.sleep(0.2)
            return Outcome.success(item, item.payload, 0.0)

        stream = Dispatcher(straggler).dispatch(make_work_items(["slow", "b", "c", "d"]))
        received = _drain(stream)

        assert received[-1].index == 0
        assert len(received) == 4


class TestFailureCapture:
    """Failures are outcomes, never dropped items."""

    def test_scripted_failure_keeps_its_index(self):
        executor = ScriptedOrderExecutor(order=[0, 1, 2], failures={1})
        stream = Dispatcher(executor).dispatch(make_work_items(["a", "b", "c"]))
        received = _drain(stream, executor.mark_received)

        by_index = {o.index: o for o in received}
        assert len(by_index) == 3
        assert not by_index[1].ok
        assert by_index[1].failure.reason
        assert by_index[0].ok and by_index[2].ok

    def test_raising_executor_becomes_failure(self):
        def explode(item):
            if item.index == 1:
                raise ConnectionError("connection reset")
            return Outcome.success(item, None, 0.0)

        stream = Dispatcher(explode).dispatch(make_work_items(["a", "b", "c"]))
        received = {o.index: o for o in _drain(stream)}

        assert len(received) == 3
        failure = received[1].failure
        assert failure is not None
        assert failure.reason == "ConnectionError: connection reset"
        assert failure.payload == "b"
        assert received[1].duration >= 0.0

    def test_mismatched_outcome_becomes_failure(self):
        def wrong_index(item):
            return Outcome.success(WorkItem(item.index + 100, item.payload), None, 0.0)

        stream = Dispatcher(wrong_index).dispatch(make_work_items(["a", "b"]))
        received = _drain(stream)

        assert sorted(o.index for o in received) == [0, 1]
        assert all(not o.ok for o in received)
        assert "mismatched" in received[0].failure.reason

    def test_mismatched_payload_becomes_failure(self):
        def wrong_payload(item):
            return Outcome.success(WorkItem(item.index, f"{item.payload}-other"), None, 0.0)

        stream = Dispatcher(wrong_payload).dispatch(make_work_items(["a", "b"]))
        received = {o.index: o for o in _drain(stream)}

        assert sorted(received) == [0, 1]
        assert received[0].payload == "a"
        assert not received[0].ok
        assert "mismatched" in received[0].failure.reason

    @pytest.mark.filterwarnings("ignore::pytest.PytestUnhandledThreadExceptionWarning")
    def test_system_exit_in_executor_still_yields_outcome(self):
        def abort(item):
            if item.index == 1:
                raise SystemExit("worker shutting down")
            return Outcome.success(item, None, 0.0)

        stream = Dispatcher(abort).dispatch(make_work_items(["a", "b", "c"]))
        received = {o.index: o for o in _drain(stream)}

        assert sorted(received) == [0, 1, 2]
        assert received[1].failure.reason == "SystemExit: worker shutting down"
        assert received[1].failure.payload == "b"
        assert received[0].ok and received[2].ok
        assert stream.closed

    @pytest.mark.filterwarnings("ignore::pytest.PytestUnhandledThreadExceptionWarning")
    def test_system_exit_in_executor_reassembles(self):
        def abort(item):
            if item.index == 1:
                raise SystemExit(3)
            return Outcome.success(item, item.payload, 0.0)

        stream = Dispatcher(abort).dispatch(make_work_items(["a", "b", "c"]))
        ordered = Reassembler(3).consume(stream)

        assert [o.index for o in ordered] == [0, 1, 2]
        assert not ordered[1].ok


class TestBoundedConcurrency:
    """Optional cap on simultaneous executor calls."""

    def test_max_concurrency_is_respected(self):
        active = 0
        peak = 0
        lock = threading.Lock()

        def counting(item):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.03)
            with lock:
                active -= 1
            return Outcome.success(item, None, 0.03)

        stream = Dispatcher(counting, max_concurrency=2).dispatch(make_work_items(range(8)))
        received = _drain(stream)

        assert len(received) == 8
        assert peak <= 2
