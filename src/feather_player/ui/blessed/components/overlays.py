"""Popup and help overlays drawn on top of the body."""

from blessed import Terminal

from ..helpers import fit, write_at
from ..state_selectors import PopupView


def _box_geometry(term: Terminal, height: int, width: int) -> tuple[int, int, int]:
    width = min(width, max(term.width - 4, 10))
    x = max((term.width - width) // 2, 0)
    y = max((term.height - height) // 2, 0)
    return x, y, width


def _draw_frame(term: Terminal, x: int, y: int, width: int, height: int, title: str) -> None:
    inner = width - 2
    label = fit(term, f" {title} ", inner)
    top = "┌" + label + "─" * max(inner - term.length(label), 0) + "┐"
    write_at(term, x, y, term.cyan(top), clear=False)
    for i in range(1, height - 1):
        write_at(term, x, y + i, term.cyan("│") + " " * inner + term.cyan("│"), clear=False)
    write_at(term, x, y + height - 1, term.cyan("└" + "─" * inner + "┘"), clear=False)


def render_popup(term: Terminal, popup: PopupView, selected_char: str = ">") -> None:
    """Render a modal popup centered on screen."""
    content = len(popup.rows) + (1 if popup.input else 0) + (1 if popup.error else 0) + 1
    height = min(content + 2, max(term.height - 2, 5))
    x, y, width = _box_geometry(term, height, 50)
    _draw_frame(term, x, y, width, height, popup.title)

    inner = width - 4
    line = y + 1
    last = y + height - 2

    if popup.input is not None:
        text = popup.input.prompt + popup.input.text + "█"
        write_at(term, x + 2, line, fit(term, text, inner), clear=False)
        line += 1

    # Keep the selected row visible in long lists
    rows = popup.rows
    room = max(last - line - (1 if popup.error else 0), 1)
    selected = next((i for i, row in enumerate(rows) if row.selected), 0)
    offset = max(0, selected - room + 1)
    for row in rows[offset:offset + room]:
        marker = f"{selected_char} " if row.selected else "  "
        text = fit(term, marker + row.text, inner)
        write_at(term, x + 2, line, term.black_on_cyan(text) if row.selected else text, clear=False)
        line += 1

    if popup.error:
        write_at(term, x + 2, line, term.red(fit(term, popup.error, inner)), clear=False)

    write_at(term, x + 2, last, term.bright_black(fit(term, popup.hint, inner)), clear=False)


def render_help(term: Terminal, rows: tuple[tuple[str, str], ...]) -> None:
    """Render the key reference overlay."""
    height = min(len(rows) + 3, max(term.height - 2, 5))
    x, y, width = _box_geometry(term, height, 60)
    _draw_frame(term, x, y, width, height, "Keys (Esc or ? to close)")

    inner = width - 4
    for i, (keys, description) in enumerate(rows[: height - 3]):
        text = term.bold_yellow(f"{keys:<14}") + term.white(description)
        write_at(term, x + 2, y + 1 + i, fit(term, text, inner), clear=False)
