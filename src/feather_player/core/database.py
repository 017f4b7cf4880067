"""
SQLite database operations for Feather

Every write commits before the function returns, so a read issued right
after a write always observes it.
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger

from feather_player.domain.library.models import (
    HistoryEntry,
    ListeningStats,
    Track,
)

from .config import get_data_dir
from .exceptions import (
    DuplicateNameError,
    EmptyNameError,
    PersistenceError,
    PlaylistNotFoundError,
)

# Database schema version for migrations
SCHEMA_VERSION = 2

DEFAULT_HISTORY_LIMIT = 50


def get_database_path() -> Path:
    """Get the path to the SQLite database file."""
    return get_data_dir() / "feather.db"


@contextmanager
def get_db_connection():
    """Get a database connection with proper cleanup.

    sqlite3 errors raised while the connection is open are re-raised as
    PersistenceError.
    """
    db_path = get_database_path()
    try:
        conn = sqlite3.connect(db_path, timeout=10.0)
    except sqlite3.Error as e:
        raise PersistenceError(f"Cannot open database {db_path}: {e}") from e

    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        yield conn
    except sqlite3.Error as e:
        conn.rollback()
        logger.error(f"Database error: {e}")
        raise PersistenceError(str(e)) from e
    finally:
        conn.close()


def migrate_database(conn, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 1:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS history (
                track_id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                artists TEXT NOT NULL DEFAULT '[]', -- JSON list
                duration REAL,
                played_at TEXT NOT NULL, -- ISO timestamp of last play
                seq INTEGER NOT NULL -- tie-breaker for identical timestamps
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_history_played ON history (played_at, seq)"
        )

        conn.execute("""
            CREATE TABLE IF NOT EXISTS playlists (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT UNIQUE NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS playlist_tracks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                playlist_id INTEGER NOT NULL,
                track_id TEXT NOT NULL,
                title TEXT NOT NULL,
                artists TEXT NOT NULL DEFAULT '[]',
                duration REAL,
                position INTEGER NOT NULL,
                added_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (playlist_id) REFERENCES playlists (id) ON DELETE CASCADE,
                UNIQUE (playlist_id, track_id)
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_playlist_tracks_playlist_id ON playlist_tracks (playlist_id, position)"
        )
        conn.commit()

    if current_version < 2:
        # v1 -> v2: listening statistics for the Home screen
        conn.execute("""
            CREATE TABLE IF NOT EXISTS listening_stats (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                songs_played INTEGER NOT NULL DEFAULT 0,
                seconds_played REAL NOT NULL DEFAULT 0
            )
        """)
        conn.execute(
            "INSERT OR IGNORE INTO listening_stats (id, songs_played, seconds_played) VALUES (1, 0, 0)"
        )
        conn.commit()


def init_database() -> None:
    """Initialize the database with required tables."""
    db_path = get_database_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection() as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        cursor = conn.execute("SELECT MAX(version) as version FROM schema_version")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] else 0
        cursor.close()

        if current_version < SCHEMA_VERSION:
            logger.info(
                f"Migrating database from v{current_version} to v{SCHEMA_VERSION}"
            )
            migrate_database(conn, current_version)

        conn.execute("DELETE FROM schema_version")
        conn.execute(
            "INSERT INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
        conn.commit()


def _row_to_track(row: sqlite3.Row, position: Optional[int] = None) -> Track:
    return Track(
        id=row["track_id"],
        title=row["title"],
        artists=tuple(json.loads(row["artists"] or "[]")),
        duration=row["duration"],
        position=position,
    )


# -----------------------------------------------------------------------------
# History
# -----------------------------------------------------------------------------


def append_history(
    track: Track,
    limit: int = DEFAULT_HISTORY_LIMIT,
    played_at: Optional[datetime] = None,
) -> None:
    """Record a play of track.

    Replaying a track moves it to the front instead of duplicating it. When
    the history grows past limit, the oldest entries are evicted.
    """
    played_at = played_at or datetime.now()

    with get_db_connection() as conn:
        next_seq = conn.execute(
            "SELECT COALESCE(MAX(seq), 0) + 1 AS seq FROM history"
        ).fetchone()["seq"]

        conn.execute(
            """
            INSERT OR REPLACE INTO history (track_id, title, artists, duration, played_at, seq)
            VALUES (?, ?, ?, ?, ?, ?)
        """,
            (
                track.id,
                track.title,
                json.dumps(list(track.artists)),
                track.duration,
                played_at.isoformat(),
                next_seq,
            ),
        )

        cursor = conn.execute(
            """
            DELETE FROM history WHERE track_id NOT IN (
                SELECT track_id FROM history
                ORDER BY played_at DESC, seq DESC
                LIMIT ?
            )
        """,
            (limit,),
        )
        if cursor.rowcount:
            logger.debug(f"Evicted {cursor.rowcount} history entries (limit={limit})")

        conn.execute(
            "UPDATE listening_stats SET songs_played = songs_played + 1 WHERE id = 1"
        )
        conn.commit()


def list_history() -> list[HistoryEntry]:
    """Return history, most recent first."""
    with get_db_connection() as conn:
        cursor = conn.execute(
            """
            SELECT track_id, title, artists, duration, played_at
            FROM history
            ORDER BY played_at DESC, seq DESC
        """
        )
        return [
            HistoryEntry(
                track=_row_to_track(row),
                played_at=datetime.fromisoformat(row["played_at"]),
            )
            for row in cursor.fetchall()
        ]


def get_last_played() -> Optional[HistoryEntry]:
    """Return the most recently played history entry, if any."""
    history = list_history()
    return history[0] if history else None


def delete_history_entry(track_id: str) -> bool:
    """Delete one history entry.

    Returns:
        True if an entry was deleted
    """
    with get_db_connection() as conn:
        cursor = conn.execute("DELETE FROM history WHERE track_id = ?", (track_id,))
        conn.commit()
        return cursor.rowcount > 0


def clear_history() -> int:
    """Delete all history entries and return how many were removed."""
    with get_db_connection() as conn:
        cursor = conn.execute("DELETE FROM history")
        conn.commit()
        return cursor.rowcount


# -----------------------------------------------------------------------------
# Playlists
# -----------------------------------------------------------------------------


def _normalize_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise EmptyNameError()
    return name


def _get_playlist_id(conn, name: str) -> int:
    row = conn.execute("SELECT id FROM playlists WHERE name = ?", (name,)).fetchone()
    if row is None:
        raise PlaylistNotFoundError(name)
    return row["id"]


def create_playlist(name: str) -> int:
    """Create an empty playlist.

    Raises:
        EmptyNameError: If the name is empty after trimming
        DuplicateNameError: If a playlist with this name exists

    Returns:
        The new playlist's id
    """
    name = _normalize_name(name)

    with get_db_connection() as conn:
        existing = conn.execute(
            "SELECT id FROM playlists WHERE name = ?", (name,)
        ).fetchone()
        if existing:
            raise DuplicateNameError(name)

        cursor = conn.execute("INSERT INTO playlists (name) VALUES (?)", (name,))
        conn.commit()
        logger.info(f"Created playlist '{name}' (id={cursor.lastrowid})")
        return cursor.lastrowid


def delete_playlist(name: str) -> None:
    """Delete a playlist and its tracks.

    Raises:
        PlaylistNotFoundError: If the playlist does not exist
    """
    with get_db_connection() as conn:
        playlist_id = _get_playlist_id(conn, name)
        conn.execute("DELETE FROM playlist_tracks WHERE playlist_id = ?", (playlist_id,))
        conn.execute("DELETE FROM playlists WHERE id = ?", (playlist_id,))
        conn.commit()
        logger.info(f"Deleted playlist '{name}'")


def add_track_to_playlist(name: str, track: Track) -> None:
    """Append track to a playlist.

    A track already in the playlist is moved to the end rather than added twice.

    Raises:
        PlaylistNotFoundError: If the playlist does not exist
    """
    with get_db_connection() as conn:
        playlist_id = _get_playlist_id(conn, name)
        next_position = conn.execute(
            "SELECT COALESCE(MAX(position), 0) + 1 AS position FROM playlist_tracks WHERE playlist_id = ?",
            (playlist_id,),
        ).fetchone()["position"]

        conn.execute(
            """
            INSERT INTO playlist_tracks (playlist_id, track_id, title, artists, duration, position)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (playlist_id, track_id) DO UPDATE SET
                title = excluded.title,
                artists = excluded.artists,
                duration = excluded.duration,
                position = excluded.position,
                added_at = CURRENT_TIMESTAMP
        """,
            (
                playlist_id,
                track.id,
                track.title,
                json.dumps(list(track.artists)),
                track.duration,
                next_position,
            ),
        )
        conn.commit()


def remove_track_from_playlist(name: str, track_id: str) -> bool:
    """Remove a track from a playlist.

    Raises:
        PlaylistNotFoundError: If the playlist does not exist

    Returns:
        True if the track was in the playlist
    """
    with get_db_connection() as conn:
        playlist_id = _get_playlist_id(conn, name)
        cursor = conn.execute(
            "DELETE FROM playlist_tracks WHERE playlist_id = ? AND track_id = ?",
            (playlist_id, track_id),
        )
        conn.commit()
        return cursor.rowcount > 0


def list_playlists() -> list[str]:
    """Return all playlist names, alphabetically."""
    with get_db_connection() as conn:
        cursor = conn.execute("SELECT name FROM playlists ORDER BY name COLLATE NOCASE")
        return [row["name"] for row in cursor.fetchall()]


def get_playlist(name: str) -> list[Track]:
    """Return a playlist's tracks in order, with 1-based positions.

    Raises:
        PlaylistNotFoundError: If the playlist does not exist
    """
    with get_db_connection() as conn:
        playlist_id = _get_playlist_id(conn, name)
        cursor = conn.execute(
            """
            SELECT track_id, title, artists, duration
            FROM playlist_tracks
            WHERE playlist_id = ?
            ORDER BY position
        """,
            (playlist_id,),
        )
        return [
            _row_to_track(row, position=index)
            for index, row in enumerate(cursor.fetchall(), start=1)
        ]


# -----------------------------------------------------------------------------
# Listening statistics
# -----------------------------------------------------------------------------


def add_listening_time(seconds: float) -> None:
    """Add seconds to the accumulated listening time."""
    if seconds <= 0:
        return
    with get_db_connection() as conn:
        conn.execute(
            "UPDATE listening_stats SET seconds_played = seconds_played + ? WHERE id = 1",
            (seconds,),
        )
        conn.commit()


def get_listening_stats() -> ListeningStats:
    with get_db_connection() as conn:
        row = conn.execute(
            "SELECT songs_played, seconds_played FROM listening_stats WHERE id = 1"
        ).fetchone()
        if row is None:
            return ListeningStats()
        return ListeningStats(
            songs_played=row["songs_played"], seconds_played=row["seconds_played"]
        )
