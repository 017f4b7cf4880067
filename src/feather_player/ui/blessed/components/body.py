"""Main content area: optional input line, list rows and paging."""

from blessed import Terminal

from ..helpers import fit, write_at
from ..state_selectors import BodyView, InputView, Row


def render_input_line(term: Terminal, view: InputView, x: int, y: int, width: int) -> None:
    cursor = term.bold_white("█") if view.focused else ""
    prompt = term.green(view.prompt) if view.focused else term.white(view.prompt)

    # Show the rightmost portion of long input
    room = max(width - len(view.prompt) - 1, 1)
    text = view.text[-room:]
    write_at(term, x, y, prompt + text + cursor)


def render_row(term: Terminal, row: Row, selected_char: str, x: int, y: int, width: int) -> None:
    marker = f"{selected_char} " if row.selected else "  "
    detail = f" {row.detail}" if row.detail else ""
    text = fit(term, row.text, max(width - len(marker) - len(detail), 1))
    padding = " " * max(width - len(marker) - term.length(text) - len(detail), 0)
    line = marker + text + padding + detail
    write_at(term, x, y, term.black_on_cyan(line) if row.selected else line)


def render_body(
    term: Terminal, body: BodyView, y_start: int, height: int, selected_char: str = ">"
) -> None:
    """
    Render the active view.

    Args:
        term: blessed Terminal instance
        body: Body section of the render snapshot
        y_start: Starting y position
        height: Available height for the body
    """
    if height <= 0:
        return

    width = max(term.width - 2, 1)
    y = y_start
    end = y_start + height

    title = term.bold_white(body.title)
    if body.page:
        title += "  " + term.cyan(body.page)
    write_at(term, 1, y, fit(term, title, width))
    y += 1

    if body.input is not None and y < end:
        render_input_line(term, body.input, 1, y, width)
        y += 1

    if body.message and y < end:
        color = term.red if body.message_level == "error" else term.yellow
        write_at(term, 1, y, color(fit(term, body.message, width)))
        y += 1

    for row in body.rows:
        if y >= end:
            break
        render_row(term, row, selected_char, 1, y, width)
        y += 1

    # Clear leftover lines from the previous frame
    while y < end:
        write_at(term, 0, y, "")
        y += 1
