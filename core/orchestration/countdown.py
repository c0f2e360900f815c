"""
CountdownGate: one-shot completion signal for a fixed number of parties.

Each party calls ``count_down()`` exactly once when it is finished. The
caller that takes the counter to zero is told so (exactly once), and
everyone blocked in ``wait()`` is released.
"""
from __future__ import annotations

import threading
from typing import Optional


class CountdownGate:
    """Thread-safe countdown latch."""

    def __init__(self, count: int):
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        self._remaining = count
        self._cond = threading.Condition(threading.Lock())

    @property
    def remaining(self) -> int:
        with self._cond:
            return self._remaining

    def is_open(self) -> bool:
        return self.remaining == 0

    def count_down(self) -> bool:
        """
        Mark one party finished.

        Returns:
            True for the single call that brought the counter to zero

        Raises:
            RuntimeError: If called more times than the initial count
        """
        with self._cond:
            if self._remaining == 0:
                raise RuntimeError("CountdownGate already reached zero")
            self._remaining -= 1
            if self._remaining == 0:
                self._cond.notify_all()
                return True
            return False

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the counter reaches zero. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._remaining == 0, timeout=timeout)
