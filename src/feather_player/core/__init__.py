"""Core infrastructure layer.

This module provides foundation-level services:
- Configuration management (TOML)
- Database operations (SQLite)
- Logging (Loguru) and console output (Rich)
"""

from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_log_file,
    create_default_config,
    ensure_directories,
)

from .database import (
    get_database_path,
    get_db_connection,
    init_database,
    migrate_database,
    append_history,
    list_history,
    get_last_played,
    delete_history_entry,
    clear_history,
    create_playlist,
    delete_playlist,
    add_track_to_playlist,
    remove_track_from_playlist,
    list_playlists,
    get_playlist,
    add_listening_time,
    get_listening_stats,
)

from .exceptions import (
    FeatherError,
    UserInputError,
    EmptyNameError,
    DuplicateNameError,
    PlaylistNotFoundError,
    PersistenceError,
)

from .console import get_console, print_error, print_notice, print_success, print_tracks
from .output import setup_loguru

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_log_file",
    "create_default_config",
    "ensure_directories",
    # Database
    "get_database_path",
    "get_db_connection",
    "init_database",
    "migrate_database",
    "append_history",
    "list_history",
    "get_last_played",
    "delete_history_entry",
    "clear_history",
    "create_playlist",
    "delete_playlist",
    "add_track_to_playlist",
    "remove_track_from_playlist",
    "list_playlists",
    "get_playlist",
    "add_listening_time",
    "get_listening_stats",
    # Exceptions
    "FeatherError",
    "UserInputError",
    "EmptyNameError",
    "DuplicateNameError",
    "PlaylistNotFoundError",
    "PersistenceError",
    # Output
    "get_console",
    "print_error",
    "print_notice",
    "print_success",
    "print_tracks",
    "setup_loguru",
]
