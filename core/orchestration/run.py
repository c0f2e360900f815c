"""
Fan-out run: dispatch, reassemble, and hand back the ordered outcomes.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from ..shared.types import Outcome, WorkItem, make_work_items
from .config import FanOutRunConfig
from .dispatcher import Dispatcher, ExecutorFn
from .executors import SimulatedRequestExecutor
from .reassembler import OutcomeCallback, Reassembler


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FanOutResult:
    """Finished run: outcomes in index order plus how they actually arrived."""

    outcomes: Tuple[Outcome, ...]
    wall_time: float
    arrival_order: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.outcomes)


def run_fan_out(
    work: Sequence[Any],
    executor: ExecutorFn,
    *,
    max_concurrency: Optional[int] = None,
    on_arrival: Optional[OutcomeCallback] = None,
    on_release: Optional[OutcomeCallback] = None,
) -> FanOutResult:
    """
    Run every unit of work concurrently and collect the results in order.

    Args:
        work: WorkItems, or plain payloads to be numbered in submission order
        executor: Executor called once per item
        max_concurrency: Optional cap on simultaneous executor calls
        on_arrival: Called for each Outcome in completion order
        on_release: Called for each Outcome in index order

    Returns:
        FanOutResult with the index-ordered collection
    """
    work = list(work)
    if all(isinstance(w, WorkItem) for w in work):
        items = work
    else:
        items = make_work_items(work)

    arrivals = []

    def _arrived(outcome: Outcome) -> None:
        arrivals.append(outcome.index)
        if on_arrival is not None:
            on_arrival(outcome)

    start = time.perf_counter()
    stream = Dispatcher(executor, max_concurrency=max_concurrency).dispatch(items)
    reassembler = Reassembler(stream.expected, on_arrival=_arrived, on_release=on_release)
    outcomes = reassembler.consume(stream)
    stream.wait_closed()
    wall_time = time.perf_counter() - start

    failures = sum(1 for o in outcomes if not o.ok)
    logger.info(
        "Fan-out finished: %d items, %d failed, %.3fs wall time",
        len(outcomes), failures, wall_time,
    )
    return FanOutResult(outcomes=outcomes, wall_time=wall_time, arrival_order=tuple(arrivals))


def run_from_config(
    cfg: FanOutRunConfig,
    on_arrival: Optional[OutcomeCallback] = None,
    on_release: Optional[OutcomeCallback] = None,
) -> FanOutResult:
    """Run the simulated request workload described by ``cfg``."""
    cfg.validate()
    executor = SimulatedRequestExecutor(
        max_delay_ms=cfg.max_delay_ms,
        failure_rate=cfg.failure_rate,
        seed=cfg.seed,
    )
    logger.debug("Simulated executor seed: %d", executor.seed)
    return run_fan_out(
        cfg.payloads,
        executor,
        max_concurrency=cfg.max_concurrency,
        on_arrival=on_arrival,
        on_release=on_release,
    )
