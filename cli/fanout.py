#!/usr/bin/env python3
"""
Fan-out request runner CLI.

Dispatches every request at once, prints each result the moment it arrives,
prints it again once it is next in submission order, then prints the final
ordered report and statistics.

Usage:
    python -m cli.fanout [--config CONFIG] [--seed SEED] [--csv PATH] [--chart PATH]
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path so `core` is importable when run as a script
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from core.orchestration.config import FanOutRunConfig, load_config_from_yaml
from core.orchestration.run import run_from_config
from core.reporting import LiveView, plot_durations, print_final_report, save_outcomes_csv, summarize


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False):
    """
    Setup logging to stdout and optionally to file.

    Args:
        log_path: Path to log file (None = stdout only)
        verbose: If True, use DEBUG level, otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run simulated requests concurrently and report results in submission order.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default ten endpoints, random delays and failures
  python -m cli.fanout

  # Reproducible run from a config file, with CSV and chart output
  python -m cli.fanout --config configs/default.yaml --seed 42 --csv results/outcomes.csv --chart results/durations.png

  # Custom payloads, at most 3 requests in flight
  python -m cli.fanout --payload https://a.example/x --payload https://b.example/y --max-concurrency 3
        """,
    )
    parser.add_argument(
        "--config",
        type=str,
        help="YAML run configuration (default: built-in defaults)",
    )
    parser.add_argument(
        "--payload",
        action="append",
        dest="payloads",
        help="Request identifier; repeat to add more (overrides config payloads)",
    )
    parser.add_argument("--max-delay-ms", type=int, help="Upper bound of simulated delay in ms")
    parser.add_argument("--failure-rate", type=float, help="Probability of a simulated failure (0-1)")
    parser.add_argument("--seed", type=int, help="Seed for reproducible delays and failures")
    parser.add_argument(
        "--max-concurrency",
        type=int,
        help="Cap simultaneous requests (default: unbounded, one thread per request)",
    )
    parser.add_argument("--csv", type=str, help="Write ordered outcomes to this CSV file")
    parser.add_argument("--chart", type=str, help="Write per-request duration chart (PNG)")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging (DEBUG level)")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")
    return parser


def resolve_config(args: argparse.Namespace) -> FanOutRunConfig:
    """Config file (or defaults), then command-line overrides."""
    cfg = load_config_from_yaml(args.config) if args.config else FanOutRunConfig()

    if args.payloads:
        cfg.payloads = list(args.payloads)
    if args.max_delay_ms is not None:
        cfg.max_delay_ms = args.max_delay_ms
    if args.failure_rate is not None:
        cfg.failure_rate = args.failure_rate
    if args.seed is not None:
        cfg.seed = args.seed
    if args.max_concurrency is not None:
        cfg.max_concurrency = args.max_concurrency
    if args.csv:
        cfg.csv_path = Path(args.csv)
    if args.chart:
        cfg.chart_path = Path(args.chart)

    cfg.validate()
    return cfg


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)
    logger = logging.getLogger(__name__)

    try:
        cfg = resolve_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.info("Run: %s (%d requests)", cfg.name, len(cfg.payloads))

    view = LiveView(sys.stdout)
    view.start()
    result = run_from_config(cfg, on_arrival=view.on_arrival, on_release=view.on_release)

    summary = summarize(result.outcomes, result.wall_time)
    print_final_report(result.outcomes, summary, sys.stdout)

    if cfg.csv_path:
        path = save_outcomes_csv(result.outcomes, cfg.csv_path)
        logger.info("Outcomes saved to: %s", path)
    if cfg.chart_path:
        path = plot_durations(result.outcomes, cfg.chart_path)
        logger.info("Duration chart saved to: %s", path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
