"""Value formatting and severity colouring for pymole."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from rich.style import Style
from rich.text import Text

KIB = 1 << 10
MIB = 1 << 20
GIB = 1 << 30
TIB = 1 << 40

ELLIPSIS = "…"
SEPARATOR = " · "


class Band(Enum):
    """Severity bands, plus two neutral styles that carry no severity."""

    OK = "ok"
    WARN = "warn"
    DANGER = "danger"
    SUBTLE = "subtle"
    MUTED = "muted"


@dataclass(slots=True, frozen=True)
class ThresholdTable:
    """
    Per-metric thresholds mapping a value to a band.

    Rising tables flag values at or above a limit (above it when strict);
    falling tables flag values below a limit. Values that hit neither
    limit get the base band.
    """

    warn: float
    danger: float
    base: Band = Band.OK
    rising: bool = True
    strict: bool = False


PERCENT = ThresholdTable(warn=70, danger=90)
BATTERY = ThresholdTable(warn=50, danger=20, rising=False)
TEMPERATURE = ThresholdTable(warn=70, danger=85, base=Band.SUBTLE)
DISK_IO = ThresholdTable(warn=30, danger=80, strict=True)  # MB/s
NETWORK = ThresholdTable(warn=3, danger=8, strict=True)  # MB/s

TITLE_STYLE = Style(color="#C79FD7", bold=True)

BAND_STYLES: dict[Band, Style] = {
    Band.OK: Style(color="#87D787"),
    Band.WARN: Style(color="#FFD75F"),
    Band.DANGER: Style(color="#FF6B6B", bold=True),
    Band.SUBTLE: Style(color="#9E9E9E"),
    Band.MUTED: Style(color="#5A5A5A"),
}

# Health score bands, best first: (minimum score, style)
SCORE_STYLES: list[tuple[int, Style]] = [
    (90, Style(color="#87FF87", bold=True)),
    (75, Style(color="#87D787", bold=True)),
    (60, Style(color="#FFD75F", bold=True)),
    (40, Style(color="#FFAF5F", bold=True)),
    (0, Style(color="#FF6B6B", bold=True)),
]

PRESSURE_BANDS: dict[str, Band] = {
    "warn": Band.WARN,
    "critical": Band.DANGER,
}


def _crosses(value: float, limit: float, table: ThresholdTable) -> bool:
    if not table.rising:
        return value < limit
    if table.strict:
        return value > limit
    return value >= limit


def severity(value: float, table: ThresholdTable) -> Band:
    """Classify a value against a threshold table."""
    if _crosses(value, table.danger, table):
        return Band.DANGER
    if _crosses(value, table.warn, table):
        return Band.WARN
    return table.base


def band_style(band: Band) -> Style:
    """Get the terminal style for a band."""
    return BAND_STYLES[band]


def styled(text: str, band: Band) -> Text:
    """Wrap text in the style of a band."""
    return Text(text, style=band_style(band))


def colorize(value: float, table: ThresholdTable, text: str) -> Text:
    """Style text by the band the value falls into."""
    return styled(text, severity(value, table))


def score_style(score: int) -> Style:
    """Get the style for a 0-100 health score."""
    for minimum, style in SCORE_STYLES:
        if score >= minimum:
            return style
    return SCORE_STYLES[-1][1]


def pressure_band(label: str) -> Band:
    """Map a memory pressure label to a band."""
    return PRESSURE_BANDS.get(label, Band.OK)


def human_bytes(count: int) -> str:
    """Format bytes as a human-readable string, e.g. '1.5 GB'."""
    if count > TIB:
        return f"{count / TIB:.1f} TB"
    if count > GIB:
        return f"{count / GIB:.1f} GB"
    if count > MIB:
        return f"{count / MIB:.1f} MB"
    if count > KIB:
        return f"{count / KIB:.1f} KB"
    return f"{count} B"


def human_bytes_short(count: int) -> str:
    """Format bytes compactly with no decimals, e.g. '4G'."""
    if count >= TIB:
        return f"{count / TIB:.0f}T"
    if count >= GIB:
        return f"{count / GIB:.0f}G"
    if count >= MIB:
        return f"{count / MIB:.0f}M"
    if count >= KIB:
        return f"{count / KIB:.0f}K"
    return str(count)


def format_rate(mbs: float) -> str:
    """Format a MB/s transfer rate with precision that shrinks as it grows."""
    if mbs < 0.01:
        return "0 MB/s"
    if mbs < 1:
        return f"{mbs:.2f} MB/s"
    if mbs < 10:
        return f"{mbs:.1f} MB/s"
    return f"{mbs:.0f} MB/s"


def shorten(text: str, max_len: int) -> str:
    """Truncate text to max_len characters, marking the cut with an ellipsis."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + ELLIPSIS


def join_parts(parts: Iterable[str], sep: str = SEPARATOR) -> str:
    """Join the non-empty parts with a separator."""
    return sep.join(part for part in parts if part)
