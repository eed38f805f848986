"""Configuration and command line parsing for procmon."""

import argparse
from dataclasses import dataclass
from pathlib import Path

from procmon.ordering import OrderingState, SortColumn

DEFAULT_REFRESH_INTERVAL_MS = 1000
MIN_REFRESH_INTERVAL_MS = 100
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    """Runtime settings of the monitor."""

    refresh_interval_ms: int = DEFAULT_REFRESH_INTERVAL_MS
    sort_column: SortColumn = SortColumn.MEMORY
    ascending: bool = False
    log_level: str = "WARNING"
    log_file: Path | None = None
    json_output: bool = False
    ticks: int | None = None  # Stop the JSON stream after this many ticks

    def __post_init__(self) -> None:
        if self.refresh_interval_ms < MIN_REFRESH_INTERVAL_MS:
            object.__setattr__(self, "refresh_interval_ms", MIN_REFRESH_INTERVAL_MS)

    @property
    def refresh_interval(self) -> float:
        """Refresh interval in seconds."""
        return self.refresh_interval_ms / 1000

    @property
    def ordering(self) -> OrderingState:
        return OrderingState(self.sort_column, self.ascending)


def build_parser() -> argparse.ArgumentParser:
    """Create the procmon argument parser."""
    parser = argparse.ArgumentParser(
        prog="procmon",
        description="Live process table with CPU and memory usage.",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=DEFAULT_REFRESH_INTERVAL_MS,
        metavar="MS",
        help=f"Refresh interval in milliseconds (default: {DEFAULT_REFRESH_INTERVAL_MS}).",
    )
    parser.add_argument(
        "--sort",
        choices=[column.value for column in SortColumn],
        default=SortColumn.MEMORY.value,
        help="Initial sort column (default: memory).",
    )
    parser.add_argument(
        "--ascending",
        action="store_true",
        help="Sort ascending initially instead of descending.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level (default: WARNING).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write logs to this file instead of the Textual console.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Stream snapshots as JSON lines to stdout instead of the table view.",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="With --json, stop after this many snapshots.",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> MonitorConfig:
    """Parse command line arguments into a MonitorConfig."""
    args = build_parser().parse_args(argv)
    return MonitorConfig(
        refresh_interval_ms=args.interval,
        sort_column=SortColumn(args.sort),
        ascending=args.ascending,
        log_level=args.log_level,
        log_file=args.log_file,
        json_output=args.json_output,
        ticks=args.ticks,
    )
