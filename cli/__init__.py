"""
Command-line entry points.

Provides command-line interfaces for:
- Running a simulated fan-out request batch with live and ordered output
"""
