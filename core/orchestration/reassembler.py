"""
Reassembler: restore submission order from an out-of-order Outcome stream.

Two views of the same stream are produced at once:
- arrival order: ``on_arrival`` is called for every Outcome as soon as it is fed
- index order: Outcomes wait in a min-heap until every lower index has been
  released, then ``on_release`` is called and they land in the ordered
  collection at their index
"""
from __future__ import annotations

import heapq
import logging
from typing import Callable, Iterable, List, Optional, Tuple

from ..shared.types import Outcome


logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[Outcome], None]


class ReassemblyError(RuntimeError):
    """Stream ended without every index 0..N-1 being released."""


class Reassembler:
    """
    Index-order reassembly over a stream of N Outcomes.

    Smallest pending index is always checked first; indices are released
    strictly ascending.
    """

    def __init__(
        self,
        expected: int,
        on_arrival: Optional[OutcomeCallback] = None,
        on_release: Optional[OutcomeCallback] = None,
    ):
        if expected < 0:
            raise ValueError(f"expected must be non-negative, got {expected}")
        self.expected = expected
        self.on_arrival = on_arrival
        self.on_release = on_release
        self.next_index = 0
        self.received = 0
        self._heap: List[Tuple[int, Outcome]] = []
        self._seen = set()
        self._ordered: List[Optional[Outcome]] = [None] * expected

    @property
    def pending(self) -> int:
        """Outcomes received but not yet released."""
        return len(self._heap)

    def feed(self, outcome: Outcome) -> List[Outcome]:
        """
        Accept one Outcome and release whatever contiguous run it completes.

        Returns:
            Outcomes released by this call, ascending by index

        Raises:
            ValueError: If the index is out of range or was already fed
        """
        if not 0 <= outcome.index < self.expected:
            raise ValueError(f"Outcome index {outcome.index} outside 0..{self.expected - 1}")
        if outcome.index in self._seen:
            raise ValueError(f"Duplicate outcome for index {outcome.index}")
        self._seen.add(outcome.index)
        self.received += 1

        if self.on_arrival is not None:
            self.on_arrival(outcome)

        heapq.heappush(self._heap, (outcome.index, outcome))

        released = []
        while self._heap and self._heap[0][0] == self.next_index:
            _, ready = heapq.heappop(self._heap)
            self._ordered[self.next_index] = ready
            self.next_index += 1
            released.append(ready)
            if self.on_release is not None:
                self.on_release(ready)
        return released

    def finish(self) -> Tuple[Outcome, ...]:
        """
        Verify every index was released and return the ordered collection.

        Raises:
            ReassemblyError: If outcomes are missing or still buffered
        """
        if self.next_index != self.expected or self._heap:
            missing = [i for i, o in enumerate(self._ordered) if o is None]
            raise ReassemblyError(
                f"Reassembly incomplete: released {self.next_index}/{self.expected}, "
                f"{len(self._heap)} buffered, missing indices {missing}"
            )
        logger.debug("Reassembled %d outcomes", self.expected)
        return tuple(self._ordered)

    def consume(self, stream: Iterable[Outcome]) -> Tuple[Outcome, ...]:
        """Feed a whole stream and return the finished ordered collection."""
        for outcome in stream:
            self.feed(outcome)
        return self.finish()
