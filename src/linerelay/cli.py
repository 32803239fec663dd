"""Command-line interface for linerelay.

Usage:
    linerelay
    linerelay --seed 42 --stop-deadline 10
    LOG_FORMAT=json linerelay --line-length 7
"""

from __future__ import annotations

import argparse
import logging
import sys

from linerelay import __version__
from linerelay.engine.coordinator import RelayCoordinator, RelaySummary
from linerelay.errors import ConfigurationError
from linerelay.logging_config import configure_logging

EXIT_CONFIG_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments. Unset options fall back to RELAY_* settings."""
    parser = argparse.ArgumentParser(
        prog="linerelay",
        description="Relay a token back and forth along a line of agents.",
    )
    parser.add_argument("--line-length", type=int, help="Number of agents (default: 5)")
    parser.add_argument(
        "--start-offset",
        type=float,
        help="Time at which the Origin emits the first token (default: 1.0)",
    )
    parser.add_argument(
        "--stop-deadline",
        type=float,
        help="Time at which all agents stop (default: 30.0)",
    )
    parser.add_argument("--hop-latency", type=float, help="Time to cross one link (default: 0.5)")
    parser.add_argument("--seed", type=int, help="Base seed for reproducible runs")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log format (default: LOG_FORMAT or text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def print_summary(summary: RelaySummary) -> None:
    """Print receipts and sends per node."""
    print(f"Receipts: {summary.total_receipts} | Frames sent: {summary.frames_sent} | ", end="")
    print(f"Dropped: {summary.frames_dropped}")
    for position, count in summary.receipts_by_node.items():
        role = summary.final_roles[position]
        sends = summary.sends_by_node[position]
        print(f"  node {position} ({role}): received={count} sent={sends}")


def main(args: list[str] | None = None) -> int:
    """Run one relay scenario.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success, 2 for an invalid configuration).
    """
    parsed = parse_args(args)

    level = getattr(logging, parsed.log_level) if parsed.log_level else None
    configure_logging(level=level, format_type=parsed.log_format)

    overrides = {
        name: value
        for name, value in (
            ("line_length", parsed.line_length),
            ("start_offset", parsed.start_offset),
            ("stop_deadline", parsed.stop_deadline),
            ("hop_latency", parsed.hop_latency),
            ("seed", parsed.seed),
        )
        if value is not None
    }

    try:
        coordinator = RelayCoordinator.from_overrides(**overrides)
        world = coordinator.run()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    print_summary(coordinator.summarize(world))
    return 0


if __name__ == "__main__":
    sys.exit(main())
