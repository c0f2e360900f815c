"""
Orchestration layer: fan-out dispatch, completion signalling, in-order reassembly.
"""

from .config import FanOutRunConfig, load_config_from_yaml
from .countdown import CountdownGate
from .dispatcher import Dispatcher, OutcomeStream
from .executors import CallableExecutor, Executor, SimulatedRequestExecutor
from .reassembler import Reassembler, ReassemblyError
from .run import FanOutResult, run_fan_out, run_from_config

__all__ = [
    "FanOutRunConfig",
    "load_config_from_yaml",
    "CountdownGate",
    "Dispatcher",
    "OutcomeStream",
    "CallableExecutor",
    "Executor",
    "SimulatedRequestExecutor",
    "Reassembler",
    "ReassemblyError",
    "FanOutResult",
    "run_fan_out",
    "run_from_config",
]
