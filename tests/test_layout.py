"""Tests for the header and two-column grid layout."""

import dataclasses

from rich.text import Text

from pymole.cards import Card
from pymole.formatting import Band, band_style, score_style
from pymole.layout import (
    GUTTER,
    TITLE,
    column_width,
    compose_view,
    render_card,
    render_columns,
    render_header,
    render_view,
)
from pymole.mascot import MOLE_POSES, mascot_frame
from pymole.models import HardwareInfo, MetricsSnapshot


def make_card(title, *lines):
    return Card(icon="#", title=title, lines=tuple(Text(line) for line in lines))


def test_column_width():
    assert column_width(0) == 38
    assert column_width(80) == 38
    assert column_width(120) == 58
    assert column_width(120, minimum=70) == 70


class TestRenderCard:
    """Tests for render_card."""

    def test_natural_height(self):
        lines = render_card(make_card("CPU", "a", "b"), 20)

        # Title, two content lines, trailing blank
        assert [line.plain for line in lines[1:]] == ["a", "b", ""]
        assert lines[0].plain == "# CPU " + "─" * 14

    def test_padded_to_height(self):
        lines = render_card(make_card("CPU", "a"), 20, height=6)

        assert len(lines) == 6
        assert all(line.plain == "" for line in lines[2:])

    def test_rule_has_minimum_width(self):
        lines = render_card(make_card("A long title", "a"), 5)
        assert lines[0].plain.endswith(" " + "─" * 4)

    def test_card_lines_are_not_shared(self):
        card = make_card("CPU", "a")
        render_card(card, 20)[1].append("changed")
        assert card.lines[0].plain == "a"


class TestRenderColumns:
    """Tests for render_columns."""

    def test_row_heights_are_equalised(self):
        left = make_card("Left", "L0", "L1")
        right = make_card("Right", "R0", "R1", "R2", "R3", "R4")
        lines = render_columns([left, right], 80)

        # Taller card: title + 5 lines + trailing blank
        assert len(lines) == 7

    def test_right_column_is_aligned(self):
        left = make_card("Left", "L0", "L1")
        right = make_card("Right", "R0", "R1", "R2")
        lines = render_columns([left, right], 80)
        right_start = column_width(80) + len(GUTTER)

        assert lines[0].plain.index("# Right") == right_start
        for number in range(3):
            assert lines[number + 1].plain.index(f"R{number}") == right_start

    def test_wide_left_line_pushes_right_column(self):
        wide = "x" * 50
        lines = render_columns([make_card("Left", wide), make_card("Right", "R0")], 80)
        assert lines[1].plain.index("R0") == 50 + len(GUTTER)

    def test_odd_card_takes_left_column(self):
        cards = [make_card("A", "a"), make_card("B", "b"), make_card("C", "c1", "c2")]
        lines = render_columns(cards, 80)

        # Row one: 3 lines each; row two: 4 lines, C alone
        assert len(lines) == 7
        assert lines[3].plain.startswith("# C ")
        assert lines[4].plain == "c1"

    def test_no_cards(self):
        assert render_columns([], 80) == []


class TestRenderHeader:
    """Tests for render_header."""

    snapshot = dataclasses.replace(
        MetricsSnapshot.empty(),
        health_score=92,
        hardware=HardwareInfo(model="ThinkPad X1", total_ram="16G", os_version="Linux 6.8"),
    )

    def test_header_line(self):
        header = render_header(self.snapshot, "", 0, 80)[0]

        assert header.plain == f"{TITLE}  Health ● 92  ThinkPad X1 · 16G · Linux 6.8"

    def test_health_score_colour(self):
        header = render_header(self.snapshot, "", 0, 80)[0]
        fragment = "● 92"
        start = header.plain.index(fragment)
        styles = [
            span.style
            for span in header.spans
            if span.start <= start and span.end >= start + len(fragment)
        ]
        assert score_style(92) in styles

    def test_mascot_follows_header(self):
        lines = render_header(self.snapshot, "", 7, 80)
        mascot = [line.plain for line in lines[2:]]

        assert lines[1].plain == ""
        assert mascot == mascot_frame(7, 80)

    def test_error_line(self):
        lines = render_header(self.snapshot, "Metrics collection failed", 0, 80)
        error = lines[-2]

        assert len(lines) == 2 + len(MOLE_POSES[0]) + 2
        assert error.plain == "Metrics collection failed"
        assert error.style == band_style(Band.DANGER)
        assert lines[-1].plain == ""

    def test_multiline_error_stays_on_one_line(self):
        lines = render_header(self.snapshot, "Metrics collection failed: boom\n  second", 0, 80)

        assert len(lines) == 2 + len(MOLE_POSES[0]) + 2
        assert lines[-2].plain == "Metrics collection failed: boom second"


class TestComposeView:
    """Tests for compose_view and render_view."""

    def test_grid_follows_header(self):
        plain = compose_view(MetricsSnapshot.empty(), "", 0, 100).plain

        for title in ("CPU", "Memory", "Disk", "Power", "Processes", "Network"):
            assert title in plain
        assert plain.index(TITLE) < plain.index("CPU")

    def test_error_hides_grid(self):
        plain = compose_view(MetricsSnapshot.empty(), "Collector crashed", 0, 100).plain

        assert "Collector crashed" in plain
        assert "Memory" not in plain
        assert "Processes" not in plain

    def test_narrow_terminal_still_renders(self):
        plain = compose_view(MetricsSnapshot.empty(), "", 3, 0).plain
        assert TITLE in plain

    def test_render_view_emits_ansi(self):
        output = render_view(MetricsSnapshot.empty(), "", 0, 100)

        assert "\x1b[" in output
        assert TITLE in output
        assert "Collecting..." in output

    def test_render_view_does_not_wrap(self):
        output = render_view(MetricsSnapshot.empty(), "", 0, 20)
        rendered = Text.from_ansi(output).plain.rstrip().split("\n")
        composed = compose_view(MetricsSnapshot.empty(), "", 0, 20).plain.rstrip().split("\n")

        assert [line.rstrip() for line in rendered] == [line.rstrip() for line in composed]
