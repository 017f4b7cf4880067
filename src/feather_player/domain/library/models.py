"""
Music library domain models.

Tracks are immutable once fetched from the provider.
"""

from datetime import datetime
from typing import NamedTuple, Optional


class Track(NamedTuple):
    """A single playable item identified by its provider id."""

    id: str  # Provider-native id (YouTube video id)
    title: str
    artists: tuple[str, ...] = ()
    duration: Optional[float] = None  # in seconds
    position: Optional[int] = None  # 1-based index inside an expanded playlist

    @property
    def artist_line(self) -> str:
        return ", ".join(self.artists) if self.artists else "Unknown artist"

    @property
    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.id}"


class PlaylistRef(NamedTuple):
    """A remote playlist found through playlist search."""

    id: str
    title: str
    url: str
    author: Optional[str] = None
    track_count: Optional[int] = None


class HistoryEntry(NamedTuple):
    """A track together with the time it was last played."""

    track: Track
    played_at: datetime


class ListeningStats(NamedTuple):
    """Aggregate listening statistics shown on the Home screen."""

    songs_played: int = 0
    seconds_played: float = 0.0


def format_duration(seconds: Optional[float]) -> str:
    """Format a duration as M:SS (or H:MM:SS); unknown durations show as --:--."""
    if seconds is None or seconds < 0:
        return "--:--"

    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_listening_time(seconds: float) -> str:
    """Format accumulated listening time, e.g. '3h 12m' or '45m'."""
    minutes = int(seconds // 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"
