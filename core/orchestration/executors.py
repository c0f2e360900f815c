"""
Executors: run one WorkItem and return its Outcome.

An executor may be called from many threads at once and must not share
mutable state between calls. Logical failure is returned as a failed
Outcome, never raised.
"""
from __future__ import annotations

import time
from typing import Any, Callable, Optional, Protocol

import numpy as np

from ..shared.defaults import FAILURE_RATE, MAX_DELAY_MS, RESPONSE_PREFIX_CHARS
from ..shared.types import Outcome, WorkItem


class Executor(Protocol):
    """Runs a single WorkItem."""

    def __call__(self, item: WorkItem) -> Outcome:
        ...


class SimulatedRequestExecutor:
    """
    Stand-in for a network request: random delay, random failure.

    Each call derives its own generator from ``(seed, item.index)``, so
    concurrent calls share no random state and a seeded run produces the
    same delays and failures per item regardless of scheduling.
    """

    def __init__(
        self,
        max_delay_ms: int = MAX_DELAY_MS,
        failure_rate: float = FAILURE_RATE,
        seed: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize simulated executor.

        Args:
            max_delay_ms: Delays are drawn from [0, max_delay_ms) milliseconds
            failure_rate: Probability that a request fails (0.0 - 1.0)
            seed: Base seed (None = fresh entropy per run)
            sleep: Sleep function, replaceable in tests
        """
        if max_delay_ms < 0:
            raise ValueError(f"max_delay_ms must be non-negative, got {max_delay_ms}")
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise ValueError(f"seed must be an integer, got {seed!r}")
        if seed is not None and seed < 0:
            raise ValueError(f"seed must be non-negative, got {seed}")
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        self.max_delay_ms = int(max_delay_ms)
        self.failure_rate = float(failure_rate)
        self.seed = seed if seed is not None else int(np.random.SeedSequence().entropy % (2 ** 63))
        self.sleep = sleep

    def _rng(self, item: WorkItem) -> np.random.Generator:
        return np.random.default_rng([self.seed, item.index])

    def __call__(self, item: WorkItem) -> Outcome:
        rng = self._rng(item)
        delay_ms = int(rng.integers(0, self.max_delay_ms)) if self.max_delay_ms > 0 else 0
        fails = rng.random() < self.failure_rate

        self.sleep(delay_ms / 1000.0)
        duration = delay_ms / 1000.0

        if fails:
            return Outcome.failed(item, f"request failed [{item.payload}] (took {delay_ms}ms)", duration)
        prefix = str(item.payload)[:RESPONSE_PREFIX_CHARS]
        return Outcome.success(item, f"result data [{prefix}]", duration)


class CallableExecutor:
    """
    Adapt ``func(payload) -> value`` into an executor.

    Wall time is measured around the call; any exception becomes a failed
    Outcome carrying the exception type and message.
    """

    def __init__(self, func: Callable[[Any], Any]):
        self.func = func

    def __call__(self, item: WorkItem) -> Outcome:
        start = time.perf_counter()
        try:
            value = self.func(item.payload)
        except Exception as e:
            return Outcome.failed(item, f"{type(e).__name__}: {e}", time.perf_counter() - start)
        return Outcome.success(item, value, time.perf_counter() - start)
