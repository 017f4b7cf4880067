"""Terminal writes for the renderer.

Every row is redrawn in place, so a write clears whatever a longer previous
frame left on the line.
"""

import sys

from blessed import Terminal


def write_at(term: Terminal, x: int, y: int, content: str, *, clear: bool = True) -> None:
    """Write content (may carry terminal formatting) at column x, row y.

    Pass clear=False to draw over part of a row, as overlays do.
    """
    prefix = term.move_xy(x, y) + (term.clear_eol if clear else "")
    sys.stdout.write(prefix + content)


def fit(term: Terminal, text: str, width: int) -> str:
    """Truncate (possibly styled) text to width columns, adding an ellipsis."""
    if width <= 0:
        return ""
    if term.length(text) <= width:
        return text
    plain = term.strip_seqs(text)
    return plain[: max(0, width - 1)] + "…"
