"""
Summary statistics for an index-ordered outcome collection.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import pandas as pd

from ..shared.types import Outcome

COLUMNS = ["index", "payload", "status", "duration_ms", "detail"]


def outcomes_to_dataframe(outcomes: Sequence[Outcome]) -> pd.DataFrame:
    """One row per outcome, in the order given."""
    if not outcomes:
        return pd.DataFrame(columns=COLUMNS)
    rows = [
        {
            "index": o.index,
            "payload": o.payload,
            "status": o.status.value,
            "duration_ms": o.duration_ms,
            "detail": str(o.result),
        }
        for o in outcomes
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


@dataclass
class RunSummary:
    """Counts, rates and timing extremes of one run."""

    total: int
    successes: int
    failures: int
    success_rate: float  # percent
    wall_time: float  # seconds
    avg_ms_per_item: float
    fastest: Optional[Outcome] = None
    slowest: Optional[Outcome] = None
    spread: Optional[float] = None  # slowest - fastest, seconds
    spread_pct: Optional[float] = None  # spread relative to fastest


def summarize(outcomes: Sequence[Outcome], wall_time: float) -> RunSummary:
    """
    Compute the run summary.

    Fastest/slowest ties go to the first entry in ``outcomes``. With no
    outcomes every rate is 0.0 and the extremes are None.
    """
    df = outcomes_to_dataframe(outcomes)
    total = len(df)
    successes = int((df["status"] == "success").sum()) if total else 0

    summary = RunSummary(
        total=total,
        successes=successes,
        failures=total - successes,
        success_rate=(successes / total * 100) if total else 0.0,
        wall_time=wall_time,
        avg_ms_per_item=(wall_time * 1000 / total) if total else 0.0,
    )
    if total == 0:
        return summary

    durations = df["duration_ms"].astype(float)
    # idxmin/idxmax return the first occurrence on ties
    summary.fastest = outcomes[int(durations.idxmin())]
    summary.slowest = outcomes[int(durations.idxmax())]
    summary.spread = summary.slowest.duration - summary.fastest.duration
    if summary.fastest.duration > 0:
        summary.spread_pct = summary.spread / summary.fastest.duration * 100
    return summary
