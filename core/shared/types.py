"""
Shared types for the fan-out/fan-in runner.

WorkItem describes one unit of work, Outcome is the single terminal result
of executing it. A failed unit is still an Outcome: its ``result`` holds an
ExecutionFailure instead of a success value, so failures travel through the
dispatcher and reassembler exactly like successes.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional


class OutcomeStatus(Enum):
    """Terminal status of one unit of work."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class WorkItem:
    """
    Immutable description of one unit of work.

    ``index`` is the submission position (dense, 0..N-1 within a run),
    ``payload`` is opaque to the dispatcher (an endpoint URL in the demo run).
    """
    index: int
    payload: Any

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"WorkItem index must be non-negative, got {self.index}")


@dataclass(frozen=True)
class ExecutionFailure:
    """Why a unit of work failed. Carried as a value, never raised."""
    reason: str
    payload: Any = None

    def __post_init__(self):
        if not self.reason:
            raise ValueError("ExecutionFailure requires a non-empty reason")

    def __str__(self) -> str:
        return self.reason


@dataclass(frozen=True)
class Outcome:
    """
    Result of executing one WorkItem.

    ``duration`` is the measured execution time in seconds, reported for
    failures as well as successes.
    """
    index: int
    payload: Any
    result: Any
    duration: float

    @classmethod
    def success(cls, item: WorkItem, value: Any, duration: float) -> Outcome:
        return cls(index=item.index, payload=item.payload, result=value, duration=duration)

    @classmethod
    def failed(cls, item: WorkItem, reason: str, duration: float) -> Outcome:
        failure = ExecutionFailure(reason=reason, payload=item.payload)
        return cls(index=item.index, payload=item.payload, result=failure, duration=duration)

    @property
    def ok(self) -> bool:
        return not isinstance(self.result, ExecutionFailure)

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.SUCCESS if self.ok else OutcomeStatus.FAILURE

    @property
    def failure(self) -> Optional[ExecutionFailure]:
        return None if self.ok else self.result

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000.0


def make_work_items(payloads: Iterable[Any]) -> List[WorkItem]:
    """Number payloads in submission order (indices 0..N-1)."""
    return [WorkItem(index=i, payload=p) for i, p in enumerate(payloads)]
