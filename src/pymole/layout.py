"""Header and two-column card grid for the pymole dashboard."""

from rich.cells import cell_len
from rich.console import Console
from rich.text import Text

from pymole.cards import Card, build_cards
from pymole.config import ViewConfig
from pymole.formatting import TITLE_STYLE, Band, band_style, join_parts, score_style, styled
from pymole.mascot import mascot_frame
from pymole.models import MetricsSnapshot

TITLE = "Mole Status"
MIN_COLUMN_WIDTH = 38
MIN_RULE_WIDTH = 4
GUTTER = "  "


def column_width(width: int, minimum: int = MIN_COLUMN_WIDTH) -> int:
    """Width of one grid column for a terminal width."""
    return max(minimum, width // 2 - 2)


def _pad(line: Text, width: int) -> Text:
    padded = line.copy()
    padded.pad_right(max(width - padded.cell_len, 0))
    return padded


def render_card(card: Card, width: int, height: int = 0) -> list[Text]:
    """
    Render a card as lines: title rule, content, then a blank line.

    Args:
        card: The card to render.
        width: Column width the title rule stretches to.
        height: Minimum number of lines; shorter cards get blank lines appended.
    """
    title = f"{card.icon} {card.title}"
    rule_width = max(width - cell_len(title) - 1, MIN_RULE_WIDTH)
    lines = [
        Text.assemble(
            (title, TITLE_STYLE),
            " ",
            ("─" * rule_width, band_style(Band.MUTED)),
        )
    ]
    lines.extend(line.copy() for line in card.lines)
    lines.append(Text())
    while len(lines) < height:
        lines.append(Text())
    return lines


def render_columns(cards: list[Card], width: int, minimum: int = MIN_COLUMN_WIDTH) -> list[Text]:
    """
    Lay cards out two per row.

    Both cards in a row are padded to the taller one's height; a trailing
    odd card takes the left column alone.
    """
    col_width = column_width(width, minimum)
    rows: list[Text] = []
    for start in range(0, len(cards), 2):
        pair = cards[start : start + 2]
        height = max(len(render_card(card, col_width)) for card in pair)
        blocks = [render_card(card, col_width, height) for card in pair]

        if len(blocks) == 1:
            rows.extend(blocks[0])
            continue

        left, right = blocks
        left_width = max(line.cell_len for line in left)
        for left_line, right_line in zip(left, right):
            rows.append(Text.assemble(_pad(left_line, left_width), GUTTER, right_line))
    return rows


def render_header(snapshot: MetricsSnapshot, error: str, frame: int, width: int) -> list[Text]:
    """Title, health score, hardware summary and the mascot, plus any error."""
    hardware = snapshot.hardware
    info = join_parts(
        [
            hardware.model,
            hardware.cpu_model,
            hardware.total_ram,
            hardware.disk_size,
            hardware.os_version,
        ]
    )
    subtle = band_style(Band.SUBTLE)
    header_line = Text.assemble(
        (TITLE, TITLE_STYLE),
        "  ",
        ("Health ", subtle),
        (f"● {snapshot.health_score}", score_style(snapshot.health_score)),
        "  ",
        (info, subtle),
    )
    mascot = [Text(line) for line in mascot_frame(frame, width)]

    if error:
        error_line = styled(" ".join(error.split()), Band.DANGER)
        return [header_line, Text(), *mascot, error_line, Text()]
    return [header_line, Text(), *mascot]


def compose_view(
    snapshot: MetricsSnapshot,
    error: str,
    frame: int,
    width: int,
    config: ViewConfig | None = None,
) -> Text:
    """
    Compose the whole dashboard as styled text.

    The card grid is left out while an error is shown.
    """
    config = config or ViewConfig()
    lines = render_header(snapshot, error, frame, width)
    if not error:
        lines.append(Text())
        lines.extend(render_columns(build_cards(snapshot, config), width, config.min_column_width))
    return Text("\n").join(lines)


def render_view(
    snapshot: MetricsSnapshot,
    error: str,
    frame: int,
    width: int,
    config: ViewConfig | None = None,
) -> str:
    """Render the dashboard to a string with ANSI colour escapes."""
    console = Console(
        force_terminal=True,
        color_system="truecolor",
        width=max(width, 1),
        legacy_windows=False,
    )
    with console.capture() as capture:
        console.print(
            compose_view(snapshot, error, frame, width, config),
            end="",
            soft_wrap=True,
            highlight=False,
        )
    return capture.get()
