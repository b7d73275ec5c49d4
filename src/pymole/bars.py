"""Fixed-resolution bar glyphs for pymole cards."""

import math

from rich.text import Text

from pymole.formatting import (
    BATTERY,
    DISK_IO,
    NETWORK,
    PERCENT,
    ThresholdTable,
    colorize,
)

BAR_WIDTH = 18
COMPACT_WIDTH = 5

FULL = "█"
EMPTY = "░"
COMPACT_FULL = "▮"
COMPACT_EMPTY = "▯"

# MB/s per compact cell: disk I/O spans 0-50 MB/s, network 0-10 MB/s
IO_DIVISOR = 10.0
NET_DIVISOR = 2.0


def clamp_percent(percent: float) -> float:
    """Clamp a percentage to [0, 100]; NaN counts as 0."""
    if math.isnan(percent):
        return 0.0
    return min(max(percent, 0.0), 100.0)


def percent_fill(percent: float, resolution: int) -> int:
    """Number of filled cells for a percentage of capacity."""
    filled = math.floor(clamp_percent(percent) / 100 * resolution)
    return min(max(filled, 0), resolution)


def rate_fill(rate: float, divisor: float, resolution: int = COMPACT_WIDTH) -> int:
    """Number of filled cells for an absolute rate; NaN fills nothing."""
    if math.isnan(rate):
        return 0
    cells = min(max(rate / divisor, 0.0), float(resolution))
    return math.floor(cells)


def _cells(filled: int, resolution: int, full: str, empty: str) -> str:
    return full * filled + empty * (resolution - filled)


def _percent_bar(
    percent: float,
    table: ThresholdTable,
    resolution: int = BAR_WIDTH,
    full: str = FULL,
    empty: str = EMPTY,
) -> Text:
    percent = clamp_percent(percent)
    glyphs = _cells(percent_fill(percent, resolution), resolution, full, empty)
    return colorize(percent, table, glyphs)


def _rate_bar(rate: float, divisor: float, table: ThresholdTable) -> Text:
    glyphs = _cells(rate_fill(rate, divisor), COMPACT_WIDTH, COMPACT_FULL, COMPACT_EMPTY)
    return colorize(rate, table, glyphs)


def progress_bar(percent: float) -> Text:
    """Primary usage bar, coloured by percent-of-capacity bands."""
    return _percent_bar(percent, PERCENT)


def battery_bar(percent: float) -> Text:
    """Battery level bar; low charge is the dangerous end."""
    return _percent_bar(percent, BATTERY)


def mini_bar(percent: float) -> Text:
    """Compact usage bar for tight rows such as the process list."""
    return _percent_bar(percent, PERCENT, COMPACT_WIDTH, COMPACT_FULL, COMPACT_EMPTY)


def io_bar(rate: float) -> Text:
    """Disk throughput bar for a MB/s rate."""
    return _rate_bar(rate, IO_DIVISOR, DISK_IO)


def net_bar(rate: float) -> Text:
    """Network throughput bar for a MB/s rate."""
    return _rate_bar(rate, NET_DIVISOR, NETWORK)
