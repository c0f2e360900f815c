"""
Console output: live arrival view, ordered release lines, final report.
"""
from __future__ import annotations

import sys
import threading
from typing import Sequence

from ..shared.types import Outcome
from .summary import RunSummary

ROW_FORMAT = "{:<5} {:<12} {:<8} {:<45} {}"
RULE = "-" * 70


def format_duration(seconds: float) -> str:
    """Compact human duration: 850µs, 523ms, 1.25s."""
    ms = seconds * 1000
    if ms < 1:
        return f"{ms * 1000:.0f}µs"
    if ms < 1000:
        return f"{ms:.0f}ms"
    return f"{seconds:.2f}s"


def _header(stream) -> None:
    stream.write(ROW_FORMAT.format("Index", "Duration", "Status", "Payload", "Detail") + "\n")
    stream.write(RULE + "\n")


def _row(outcome: Outcome, detail: str) -> str:
    return ROW_FORMAT.format(
        outcome.index,
        format_duration(outcome.duration),
        outcome.status.value,
        str(outcome.payload),
        detail,
    )


class LiveView:
    """
    Real-time display of a running fan-out.

    ``on_arrival`` prints every outcome as it is received (completion order),
    ``on_release`` prints it again once it is next in submission order.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self._lock = threading.Lock()
        self._started = False

    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            self._started = True
            self.stream.write("Starting concurrent requests...\n")
            _header(self.stream)
            self.stream.flush()

    def on_arrival(self, outcome: Outcome) -> None:
        self.start()
        with self._lock:
            self.stream.write(_row(outcome, f"{outcome.status.value} (received)") + "\n")
            self.stream.flush()

    def on_release(self, outcome: Outcome) -> None:
        with self._lock:
            if outcome.ok:
                self.stream.write(f"[OK] [{outcome.index}] ordered result: {outcome.result}\n")
            else:
                self.stream.write(f"[FAIL] [{outcome.index}] error result: {outcome.failure}\n")
            self.stream.flush()


def print_final_report(outcomes: Sequence[Outcome], summary: RunSummary, stream=None) -> None:
    """Print the index-ordered table, execution statistics and timing extremes."""
    stream = stream or sys.stdout

    stream.write(f"\n{'=' * 23} Final results (submission order) {'=' * 23}\n")
    _header(stream)
    for o in outcomes:
        detail = f"[OK] {o.result}" if o.ok else f"[FAIL] {o.failure}"
        stream.write(_row(o, detail) + "\n")

    stream.write(f"\n{'=' * 23} Execution statistics {'=' * 23}\n")
    stream.write(f"Total requests: {summary.total}\n")
    stream.write(f"Successful: {summary.successes}\n")
    stream.write(f"Failed: {summary.failures}\n")
    stream.write(f"Success rate: {summary.success_rate:.1f}%\n")
    stream.write(
        f"Total time: {format_duration(summary.wall_time)} "
        f"({summary.avg_ms_per_item:.1f}ms/request)\n"
    )

    if summary.total:
        fastest, slowest = summary.fastest, summary.slowest
        stream.write(f"\n{'=' * 23} Performance {'=' * 23}\n")
        stream.write(f"Fastest: #{fastest.index} {fastest.payload} ({format_duration(fastest.duration)})\n")
        stream.write(f"Slowest: #{slowest.index} {slowest.payload} ({format_duration(slowest.duration)})\n")
        if summary.spread_pct is not None:
            stream.write(f"Spread: {format_duration(summary.spread)} ({summary.spread_pct:.1f}%)\n")
        else:
            stream.write(f"Spread: {format_duration(summary.spread)}\n")
    stream.flush()
