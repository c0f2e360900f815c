"""
File outputs: CSV table and per-item duration chart.
"""
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt

from ..shared.types import Outcome
from .summary import outcomes_to_dataframe


def save_outcomes_csv(outcomes: Sequence[Outcome], path: Path) -> Path:
    """Write the ordered outcome table to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    outcomes_to_dataframe(outcomes).to_csv(path, index=False)
    return path


def plot_durations(outcomes: Sequence[Outcome], path: Path) -> Path:
    """
    Horizontal bar chart of per-item duration, in submission order.

    Successful items are green, failed ones red.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = outcomes_to_dataframe(outcomes)

    fig, ax = plt.subplots(figsize=(10, max(2.0, 0.4 * len(df) + 1)))
    if df.empty:
        ax.text(0.5, 0.5, "No outcomes", ha="center", va="center", transform=ax.transAxes)
    else:
        labels = [f"#{i} {str(p)[-30:]}" for i, p in zip(df["index"], df["payload"])]
        colors = ["green" if s == "success" else "indianred" for s in df["status"]]
        ax.barh(labels, df["duration_ms"], color=colors)
        ax.invert_yaxis()  # index 0 on top
        ax.set_xlabel("Duration (ms)")
    ax.set_title("Duration per request")
    ax.grid(True, axis="x", alpha=0.3)

    fig.tight_layout()
    fig.savefig(path, dpi=100)
    plt.close(fig)
    return path
