"""
Dispatcher: fan-out of WorkItems onto threads, fan-in onto one channel.

One thread is started per WorkItem without waiting for any to finish. Every
thread delivers exactly one Outcome to a shared queue and then counts down
a CountdownGate. A separate closer thread waits for the gate to open and
only then puts the end-of-stream sentinel, so no Outcome can follow the
close and the close cannot happen while an executor is still running.
"""
from __future__ import annotations

import logging
import threading
import time
from queue import Queue
from typing import Callable, Iterator, List, Optional, Sequence

from ..shared.defaults import CHANNEL_CAPACITY_FACTOR, MAX_CONCURRENCY
from ..shared.types import Outcome, WorkItem
from .countdown import CountdownGate


logger = logging.getLogger(__name__)

# End-of-stream marker; compared with "is"
CLOSED = object()

ExecutorFn = Callable[[WorkItem], Outcome]


class OutcomeStream:
    """
    Outcomes of one dispatch, in completion order.

    Iterate it once; iteration ends when the dispatcher closes the channel.
    ``state`` moves dispatching -> draining -> closed and never back.
    """

    def __init__(self, expected: int, channel: Queue, gate: CountdownGate):
        self.expected = expected
        self.threads: List[threading.Thread] = []
        self.state = "dispatching"
        self._channel = channel
        self._gate = gate

    @property
    def closed(self) -> bool:
        return self.state == "closed"

    def __iter__(self) -> Iterator[Outcome]:
        if self.closed:
            return
        self.state = "draining"
        while True:
            outcome = self._channel.get()
            if outcome is CLOSED:
                self.state = "closed"
                return
            yield outcome

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        """Block until every executor invocation has returned."""
        return self._gate.wait(timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        deadline = None if timeout is None else time.monotonic() + timeout
        for t in self.threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            t.join(remaining)


class Dispatcher:
    """
    Unbounded fan-out dispatcher.

    Launches all executor invocations at once. ``max_concurrency`` optionally
    caps how many invocations run simultaneously (threads are still started
    up front and wait on a semaphore).
    """

    def __init__(
        self,
        executor: ExecutorFn,
        max_concurrency: Optional[int] = MAX_CONCURRENCY,
        capacity_factor: int = CHANNEL_CAPACITY_FACTOR,
    ):
        """
        Initialize dispatcher.

        Args:
            executor: Callable running one WorkItem and returning its Outcome
            max_concurrency: Max simultaneous executor calls (None = unbounded)
            capacity_factor: Channel capacity as a multiple of the item count
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        if capacity_factor < 1:
            raise ValueError(f"capacity_factor must be >= 1, got {capacity_factor}")
        self.executor = executor
        self.max_concurrency = max_concurrency
        self.capacity_factor = capacity_factor

    def dispatch(self, items: Sequence[WorkItem]) -> OutcomeStream:
        """
        Start one execution per item and return the stream of their Outcomes.

        Returns immediately; Outcomes arrive on the stream as they complete.

        Raises:
            ValueError: If item indices are not exactly 0..N-1
        """
        items = list(items)
        _check_dense(items)
        n = len(items)

        # Outcomes plus the sentinel must fit without blocking a worker
        channel: Queue = Queue(maxsize=max(1, self.capacity_factor * n) + 1)
        gate = CountdownGate(n)
        stream = OutcomeStream(n, channel, gate)

        if n == 0:
            channel.put(CLOSED)
            logger.debug("Dispatch of 0 items: stream closed immediately")
            return stream

        slots = threading.BoundedSemaphore(self.max_concurrency) if self.max_concurrency else None

        logger.info(
            "Dispatching %d items (concurrency: %s)",
            n, self.max_concurrency if self.max_concurrency else "unbounded",
        )
        for item in items:
            t = threading.Thread(
                target=self._worker,
                args=(item, channel, gate, slots),
                name=f"fanout-{item.index}",
                daemon=True,
            )
            t.start()
            stream.threads.append(t)

        closer = threading.Thread(
            target=self._close_when_drained,
            args=(channel, gate),
            name="fanout-closer",
            daemon=True,
        )
        closer.start()
        stream.threads.append(closer)
        return stream

    def _worker(self, item: WorkItem, channel: Queue, gate: CountdownGate, slots) -> None:
        start = time.perf_counter()
        escaped = None
        try:
            try:
                if slots is not None:
                    with slots:
                        outcome = self._invoke(item)
                else:
                    outcome = self._invoke(item)
            except BaseException as e:
                # SystemExit/KeyboardInterrupt still owe the item its outcome
                escaped = e
                logger.warning("Executor aborted for item %d (%s): %r", item.index, item.payload, e)
                outcome = Outcome.failed(item, f"{type(e).__name__}: {e}", time.perf_counter() - start)
            channel.put(outcome)
        finally:
            # put happens-before count_down, so the closer never overtakes it
            gate.count_down()
        if escaped is not None:
            raise escaped

    def _invoke(self, item: WorkItem) -> Outcome:
        start = time.perf_counter()
        try:
            outcome = self.executor(item)
        except Exception as e:
            elapsed = time.perf_counter() - start
            logger.warning("Executor raised for item %d (%s): %s", item.index, item.payload, e)
            return Outcome.failed(item, f"{type(e).__name__}: {e}", elapsed)

        if (
            not isinstance(outcome, Outcome)
            or outcome.index != item.index
            or outcome.payload != item.payload
        ):
            elapsed = time.perf_counter() - start
            logger.warning("Executor returned mismatched outcome for item %d: %r", item.index, outcome)
            return Outcome.failed(
                item, f"executor returned a mismatched outcome for index {item.index}", elapsed
            )
        return outcome

    @staticmethod
    def _close_when_drained(channel: Queue, gate: CountdownGate) -> None:
        gate.wait()
        channel.put(CLOSED)
        logger.debug("All executors returned; stream closed")


def _check_dense(items: Sequence[WorkItem]) -> None:
    indices = sorted(item.index for item in items)
    if indices != list(range(len(items))):
        raise ValueError(f"WorkItem indices must be exactly 0..{len(items) - 1}, got {indices}")
