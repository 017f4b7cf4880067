"""Bottom status bar: feedback message or key hints."""

from blessed import Terminal

from ..helpers import fit, write_at

LEVEL_COLORS = {
    "info": "white",
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


def render_status_bar(
    term: Terminal, hints: str, feedback: tuple[str, str] | None, y: int
) -> None:
    width = max(term.width - 2, 1)
    if feedback is not None:
        message, level = feedback
        color = getattr(term, LEVEL_COLORS.get(level, "white"))
        write_at(term, 1, y, color(fit(term, message, width)))
        return
    write_at(term, 1, y, term.bright_black(fit(term, hints, width)))
