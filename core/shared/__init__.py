"""
Shared types and defaults for the fan-out runner.

This module provides:
- WorkItem, Outcome and ExecutionFailure value types
- Centralized default values for simulated runs
"""
from .types import (
    ExecutionFailure,
    Outcome,
    OutcomeStatus,
    WorkItem,
    make_work_items,
)
from .defaults import (
    DEFAULT_PAYLOADS,
    MAX_DELAY_MS, FAILURE_RATE, RESPONSE_PREFIX_CHARS,
    CHANNEL_CAPACITY_FACTOR, MAX_CONCURRENCY,
)

__all__ = [
    'ExecutionFailure',
    'Outcome',
    'OutcomeStatus',
    'WorkItem',
    'make_work_items',
    'DEFAULT_PAYLOADS',
    'MAX_DELAY_MS', 'FAILURE_RATE', 'RESPONSE_PREFIX_CHARS',
    'CHANNEL_CAPACITY_FACTOR', 'MAX_CONCURRENCY',
]
