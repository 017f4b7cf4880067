"""Rich output for everything printed outside the full-screen UI.

Startup failures, the listing subcommands and exit messages go through the
shared Console here; the blessed UI never prints through Rich.
"""

from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table

from feather_player.domain.library.models import Track, format_duration

_console: Console | None = None


def get_console() -> Console:
    """Get or create the global Rich Console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def print_error(message: str) -> None:
    get_console().print(f"❌ {message}", style="red")


def print_success(message: str) -> None:
    get_console().print(f"✅ {message}", style="green")


def print_notice(message: str) -> None:
    get_console().print(message, style="yellow")


def track_table(title: str, first_column: str = "#") -> Table:
    """Table with the columns every track listing shares."""
    table = Table(title=title)
    table.add_column(first_column, justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Artists")
    table.add_column("Length", justify="right")
    return table


def add_track_row(table: Table, label: str, track: Track) -> None:
    table.add_row(label, track.title, track.artist_line, format_duration(track.duration))


def print_tracks(title: str, tracks: Iterable[Track], labels: Optional[Iterable[str]] = None) -> None:
    """Print tracks numbered from 1, or with the given first-column labels."""
    tracks = list(tracks)
    labels = list(labels) if labels is not None else [str(i) for i in range(1, len(tracks) + 1)]
    table = track_table(title)
    for label, track in zip(labels, tracks):
        add_track_row(table, label, track)
    get_console().print(table)
