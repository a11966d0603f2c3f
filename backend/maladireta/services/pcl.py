"""
PCL control-sequence fragments.

Every function returns a plain str template. Numeric parameters are written
as given; callers pass magnitudes from PrintConfiguration.
"""

from typing import Literal

ESC = "\x1b"
FORM_FEED = "\x0c"


def reset() -> str:
    """Printer reset (ESC E)."""
    return f"{ESC}E"


def set_orientation_portrait() -> str:
    return f"{ESC}&l0O"


def set_page_size_a4() -> str:
    return f"{ESC}&l26A"


def set_margins(top: int, left: int) -> str:
    """Top margin (lines) followed by left margin (columns)."""
    return f"{ESC}&l{top}E{ESC}&a{left}L"


def set_font() -> str:
    """Primary font, 10 point, upright, medium weight."""
    return f"{ESC}(s0P{ESC}(s10H{ESC}(s0S{ESC}(s0B"


def move_cursor(axis: Literal["V", "H"], position: int) -> str:
    """Absolute cursor position on the vertical (V) or horizontal (H) axis."""
    if axis not in ("V", "H"):
        raise ValueError(f"Cursor axis must be 'V' or 'H', got {axis!r}")
    return f"{ESC}&a{position}{axis}"


def form_feed() -> str:
    return FORM_FEED


def comment(text: str) -> str:
    """Provenance marker embedded in the job (not a PCL command)."""
    return f"<!-- {text} -->"
