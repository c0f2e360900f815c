"""
Reporting over finished fan-out runs.

Presentation only: tables, summary statistics and charts over the ordered
outcome collection, plus the live arrival-order view.
"""
from .summary import RunSummary, outcomes_to_dataframe, summarize
from .console import LiveView, format_duration, print_final_report
from .export import plot_durations, save_outcomes_csv

__all__ = [
    "RunSummary",
    "outcomes_to_dataframe",
    "summarize",
    "LiveView",
    "format_duration",
    "print_final_report",
    "plot_durations",
    "save_outcomes_csv",
]
