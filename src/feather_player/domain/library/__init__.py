"""Library domain - tracks, playlists and history records."""

from .models import (
    HistoryEntry,
    ListeningStats,
    PlaylistRef,
    Track,
    format_duration,
    format_listening_time,
)

__all__ = [
    "HistoryEntry",
    "ListeningStats",
    "PlaylistRef",
    "Track",
    "format_duration",
    "format_listening_time",
]
