"""Top bar: application name and mode tabs."""

from blessed import Terminal

from ..helpers import fit, write_at
from ..state_selectors import RenderSnapshot


def render_header(term: Terminal, snapshot: RenderSnapshot, y: int) -> None:
    parts = [term.bold_magenta("♪ ") + term.bold_cyan("FEATHER") + "  "]
    for label, active in snapshot.tabs:
        if active:
            parts.append(term.black_on_cyan(f" {label} "))
        else:
            parts.append(term.white(f" {label} "))
    if snapshot.pending_leader:
        parts.append("  " + term.bold_yellow(":"))

    write_at(term, 0, y, fit(term, "".join(parts), term.width))

    colors = [term.cyan, term.blue, term.magenta]
    separator = "".join(colors[i % 3]("━") for i in range(max(term.width - 1, 0)))
    write_at(term, 0, y + 1, separator)
