"""
Run configuration for fan-out runs.

FanOutRunConfig holds everything a run needs; load_config_from_yaml reads
it from a YAML file so runs can be shared and tweaked without code changes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml

from ..shared.defaults import (
    DEFAULT_PAYLOADS,
    FAILURE_RATE,
    MAX_CONCURRENCY,
    MAX_DELAY_MS,
)


@dataclass
class FanOutRunConfig:
    """Configuration for one fan-out run."""

    name: str = "default"
    description: str = ""
    payloads: List[str] = field(default_factory=lambda: list(DEFAULT_PAYLOADS))
    max_delay_ms: int = MAX_DELAY_MS
    failure_rate: float = FAILURE_RATE
    seed: Optional[int] = None
    max_concurrency: Optional[int] = MAX_CONCURRENCY
    csv_path: Optional[Path] = None
    chart_path: Optional[Path] = None

    def validate(self) -> None:
        """
        Check value types and ranges.

        Raises:
            ValueError: On the first invalid field
        """
        for name in ("max_delay_ms", "seed", "max_concurrency"):
            value = getattr(self, name)
            if value is None and name != "max_delay_ms":
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if isinstance(self.failure_rate, bool) or not isinstance(self.failure_rate, (int, float)):
            raise ValueError(f"failure_rate must be a number, got {self.failure_rate!r}")

        if self.max_delay_ms < 0:
            raise ValueError(f"max_delay_ms must be non-negative, got {self.max_delay_ms}")
        if not 0.0 <= self.failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {self.failure_rate}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {self.max_concurrency}")


def _as_int(value: Any, name: str) -> Optional[int]:
    """Coerce a YAML scalar to int; None passes through, fractions are rejected."""
    if value is None:
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _as_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def load_config_from_yaml(yaml_path: Union[str, Path]) -> FanOutRunConfig:
    """
    Load run configuration from YAML file.

    Layout (every key optional):

        name: nightly
        description: Ten endpoints, 20% failures
        requests:
          payloads: [...]
        simulation:
          max_delay_ms: 1000
          failure_rate: 0.2
          seed: 42
        dispatch:
          max_concurrency: null
        output:
          csv: results/outcomes.csv
          chart: results/durations.png

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        Validated FanOutRunConfig

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty, not a mapping, or has invalid values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must contain a mapping: {yaml_path}")

    requests = config_dict.get('requests') or {}
    simulation = config_dict.get('simulation') or {}
    dispatch = config_dict.get('dispatch') or {}
    output = config_dict.get('output') or {}

    payloads = requests.get('payloads')
    if payloads is None:
        payloads = list(DEFAULT_PAYLOADS)
    elif not isinstance(payloads, list):
        payloads = [payloads]

    csv_path = output.get('csv')
    chart_path = output.get('chart')

    cfg = FanOutRunConfig(
        name=str(config_dict.get('name', yaml_path.stem)),
        description=str(config_dict.get('description', '')),
        payloads=[str(p) for p in payloads],
        max_delay_ms=_as_int(simulation.get('max_delay_ms', MAX_DELAY_MS), 'max_delay_ms'),
        failure_rate=_as_float(simulation.get('failure_rate', FAILURE_RATE), 'failure_rate'),
        seed=_as_int(simulation.get('seed'), 'seed'),
        max_concurrency=_as_int(dispatch.get('max_concurrency', MAX_CONCURRENCY), 'max_concurrency'),
        csv_path=Path(csv_path) if csv_path else None,
        chart_path=Path(chart_path) if chart_path else None,
    )
    cfg.validate()
    return cfg
