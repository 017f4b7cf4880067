"""Player bar rendering functions."""

from blessed import Terminal

from ..helpers import fit, write_at
from ..state_selectors import PlayerBarView

PROGRESS_WIDTH = 40


def create_progress_bar(term: Terminal, progress: float, width: int = PROGRESS_WIDTH) -> str:
    """Create a colored progress bar."""
    filled = int(width * progress)
    return term.green("█" * filled) + term.white("░" * (width - filled))


def render_player_bar(term: Terminal, view: PlayerBarView, y: int) -> None:
    """
    Render the player bar (three lines).

    Args:
        term: blessed Terminal instance
        view: Player section of the render snapshot
        y: Y position of the first line
    """
    width = max(term.width - 2, 1)

    write_at(term, 0, y, term.cyan("─" * max(term.width - 1, 0)))

    title = term.bold_white(f"{view.icon} {view.title}")
    if view.artists:
        title += term.white(f" - {view.artists}")
    if view.queue:
        title += term.magenta(f"  [{view.queue}]")
    write_at(term, 1, y + 1, fit(term, title, width))

    bar_width = min(PROGRESS_WIDTH, max(width - 40, 10))
    line = (
        create_progress_bar(term, view.progress, bar_width)
        + term.white(f" {view.elapsed} / {view.total}")
        + term.cyan(f"  vol {view.volume}%")
        + term.yellow(f"  {view.status}")
    )
    write_at(term, 1, y + 2, fit(term, line, width))
