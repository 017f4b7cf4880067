"""
Feather CLI - entry point

Without a subcommand the interactive player starts. The history and
playlists subcommands print the local library and exit.
"""

import argparse
import sys
from typing import Optional

from rich.table import Table

from feather_player import __version__
from feather_player.core.console import (
    get_console,
    print_error,
    print_notice,
    print_success,
    print_tracks,
)
from feather_player.core.exceptions import FeatherError


def show_history(config_path: Optional[str], clear: bool = False, debug: bool = False) -> int:
    from feather_player.core import database
    from feather_player.main import setup

    setup(config_path, "DEBUG" if debug else None, console_logging=debug)
    if clear:
        removed = database.clear_history()
        print_success(f"Cleared {removed} history entries")
        return 0

    entries = database.list_history()
    if not entries:
        print_notice("No history yet")
        return 0

    print_tracks(
        "Recently played",
        (entry.track for entry in entries),
        labels=(entry.played_at.strftime("%Y-%m-%d %H:%M") for entry in entries),
    )
    return 0


def show_playlists(config_path: Optional[str], name: Optional[str], debug: bool = False) -> int:
    from feather_player.core import database
    from feather_player.main import setup

    setup(config_path, "DEBUG" if debug else None, console_logging=debug)
    if name is not None:
        tracks = database.get_playlist(name)
        print_tracks(name.strip(), tracks, labels=(str(t.position) for t in tracks))
        return 0

    names = database.list_playlists()
    if not names:
        print_notice("No playlists yet")
        return 0

    table = Table(title="Playlists")
    table.add_column("Name", style="bold")
    table.add_column("Tracks", justify="right")
    for playlist in names:
        table.add_row(playlist, str(len(database.get_playlist(playlist))))
    get_console().print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feather",
        description="Feather - a lightweight terminal music player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Path to config.toml")
    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Override logging.level from config",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Shortcut for --log-level DEBUG"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")
    history_parser = subparsers.add_parser("history", help="Print recently played tracks")
    history_parser.add_argument(
        "--clear", action="store_true", help="Delete all history entries"
    )
    playlists_parser = subparsers.add_parser(
        "playlists", help="List playlists, or the tracks of one playlist"
    )
    playlists_parser.add_argument("name", nargs="?", help="Playlist name")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the feather command."""
    args = build_parser().parse_args(argv)

    if args.subcommand:
        try:
            if args.subcommand == "history":
                sys.exit(show_history(args.config, args.clear, args.debug))
            elif args.subcommand == "playlists":
                sys.exit(show_playlists(args.config, args.name, args.debug))
        except (FeatherError, FileNotFoundError) as e:
            print_error(str(e))
            sys.exit(1)

    log_level = "DEBUG" if args.debug else args.log_level

    from .main import interactive_mode

    sys.exit(interactive_mode(args.config, log_level))


if __name__ == "__main__":
    main()
