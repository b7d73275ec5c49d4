"""Runtime configuration for pymole."""

import argparse
import logging
from dataclasses import dataclass

MIN_POLL_RATE = 0.1  # Seconds
DEFAULT_PRIMARY_INTERFACE = "en0"


@dataclass(slots=True, frozen=True)
class ViewConfig:
    """Settings shared by the collector, the renderer and the app."""

    # Interface whose IPv4 address is shown on the network card
    primary_interface: str = DEFAULT_PRIMARY_INTERFACE
    min_column_width: int = 38
    refresh_interval: float = 1.0  # Seconds between metric polls
    frame_interval: float = 0.2  # Seconds between animation frames
    top_processes: int = 5
    log_level: int = logging.WARNING
    log_file: str | None = None

    @classmethod
    def from_args(cls, argv: list[str] | None = None) -> "ViewConfig":
        """
        Build a config from command-line arguments.

        Args:
            argv: Arguments to parse. Defaults to sys.argv[1:].
        """
        parser = build_parser()
        args = parser.parse_args(argv)
        if args.fps <= 0:
            parser.error("--fps must be positive")
        return cls(
            primary_interface=args.interface,
            refresh_interval=max(MIN_POLL_RATE, args.interval),
            frame_interval=1.0 / args.fps,
            top_processes=args.top,
            log_level=getattr(logging, args.log_level),
            log_file=args.log_file,
        )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the pymole command."""
    defaults = ViewConfig()
    parser = argparse.ArgumentParser(
        prog="pymole",
        description="Live terminal dashboard of the host's CPU, memory, disk, network and power.",
    )
    parser.add_argument(
        "--interface",
        default=defaults.primary_interface,
        help="Network interface whose IP is shown (default: %(default)s)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=defaults.refresh_interval,
        help="Seconds between metric polls (default: %(default)s)",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=1.0 / defaults.frame_interval,
        help="Animation frames per second (default: %(default)s)",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=defaults.top_processes,
        help="Number of processes to sample (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=logging.getLevelName(defaults.log_level),
        help="Log level (default: %(default)s)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Write logs to this file; logging is off without one",
    )
    return parser
