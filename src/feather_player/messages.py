"""Messages posted by background work to the UI thread's inbox.

Every result of asynchronous work carries the generation it was issued
under, so the UI can discard results that a newer request superseded.
"""

from dataclasses import dataclass
from typing import Optional

from feather_player.domain.library.models import PlaylistRef, Track


@dataclass(frozen=True)
class SearchCompleted:
    generation: int
    query: str
    tracks: tuple[Track, ...]


@dataclass(frozen=True)
class SearchFailed:
    generation: int
    query: str
    error: Exception


@dataclass(frozen=True)
class PlaylistSearchCompleted:
    generation: int
    query: str
    playlists: tuple[PlaylistRef, ...]


@dataclass(frozen=True)
class PlaylistSearchFailed:
    generation: int
    query: str
    error: Exception


@dataclass(frozen=True)
class PlaylistExpanded:
    generation: int
    playlist: PlaylistRef
    tracks: tuple[Track, ...]


@dataclass(frozen=True)
class PlaylistExpandFailed:
    generation: int
    playlist: PlaylistRef
    error: Exception


@dataclass(frozen=True)
class SourceResolved:
    generation: int
    track: Track
    locator: str


@dataclass(frozen=True)
class SourceFailed:
    generation: int
    track: Track
    error: Exception


@dataclass(frozen=True)
class TrackLoaded:
    generation: int
    duration: float


@dataclass(frozen=True)
class TrackLoadFailed:
    generation: int
    error: Exception


@dataclass(frozen=True)
class PlaybackTick:
    """Player status; ended is true only on the first poll that sees the end."""

    generation: Optional[int]
    position: float
    duration: float
    paused: bool
    volume: Optional[int]
    ended: bool = False


@dataclass(frozen=True)
class PlayerCrashed:
    error: Exception


@dataclass(frozen=True)
class JobFailed:
    name: str
    error: Exception


Message = (
    SearchCompleted
    | SearchFailed
    | PlaylistSearchCompleted
    | PlaylistSearchFailed
    | PlaylistExpanded
    | PlaylistExpandFailed
    | SourceResolved
    | SourceFailed
    | TrackLoaded
    | TrackLoadFailed
    | PlaybackTick
    | PlayerCrashed
    | JobFailed
)
