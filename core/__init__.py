"""
Core fan-out/fan-in modules.

Provides unified interfaces for:
- Work item and outcome types
- Parallel dispatch with a race-free completion signal
- Reassembly of out-of-order results into submission order
- Reporting (tables, summary statistics, charts)
"""
