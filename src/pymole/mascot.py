"""The mole that runs back and forth across the header."""

# Leg poses, cycled once per frame.
MOLE_POSES: tuple[tuple[str, ...], ...] = (
    (
        "     /\\_/\\",
        " ___/ o o \\",
        "/___   =-= /",
        "\\____)-m-m)",
    ),
    (
        "     /\\_/\\",
        " ___/ o o \\",
        "/___   =-= /",
        "\\____)mm__)",
    ),
    (
        "     /\\_/\\",
        " ___/ · · \\",
        "/___   =-= /",
        "\\___)-m__m)",
    ),
    (
        "     /\\_/\\",
        " ___/ o o \\",
        "/___   =-= /",
        "\\____)-mm-)",
    ),
)

MASCOT_WIDTH = 15


def mascot_pose(frame: int) -> tuple[str, ...]:
    """Pick the pose for a frame, independent of position."""
    return MOLE_POSES[frame % len(MOLE_POSES)]


def mascot_offset(frame: int, width: int) -> int:
    """
    Horizontal offset of the mascot for a frame.

    Bounces between 0 and width - MASCOT_WIDTH; the sweep period grows
    with the terminal width. Narrow terminals pin the mascot to 0.
    """
    max_offset = max(width - MASCOT_WIDTH, 0)
    cycle_length = max(max_offset * 2, 1)
    pos = frame % cycle_length
    if pos > max_offset:
        pos = cycle_length - pos
    return pos


def mascot_frame(frame: int, width: int) -> list[str]:
    """Lines of the mascot for a frame, shifted to its offset."""
    padding = " " * mascot_offset(frame, width)
    return [padding + line for line in mascot_pose(frame)]
