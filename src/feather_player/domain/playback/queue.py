"""Auto-play queue: a bound sequence of tracks and a pointer into it."""

from dataclasses import dataclass, replace
from typing import Optional

from feather_player.domain.library.models import Track


@dataclass(frozen=True)
class PlaybackQueue:
    """Immutable auto-play queue.

    When engaged, index always points at a valid entry of tracks. A
    disengaged queue has index None.
    """

    tracks: tuple[Track, ...] = ()
    index: Optional[int] = None
    source: str = ""  # Label shown in the player bar, e.g. the playlist name

    @property
    def engaged(self) -> bool:
        return self.index is not None

    @property
    def current(self) -> Optional[Track]:
        if self.index is None:
            return None
        return self.tracks[self.index]

    @property
    def remaining(self) -> int:
        if self.index is None:
            return 0
        return len(self.tracks) - self.index - 1


def bind_queue(tracks, index: int = 0, source: str = "") -> PlaybackQueue:
    """Engage auto-play over tracks starting at index.

    Raises:
        IndexError: If index is outside tracks
    """
    tracks = tuple(tracks)
    if not 0 <= index < len(tracks):
        raise IndexError(f"Queue index {index} out of range for {len(tracks)} tracks")
    return PlaybackQueue(tracks=tracks, index=index, source=source)


def skip_next(queue: PlaybackQueue) -> tuple[PlaybackQueue, Optional[Track]]:
    """Move to the next entry; no-op (None) when disengaged or at the end."""
    if queue.index is None or queue.index + 1 >= len(queue.tracks):
        return queue, None
    moved = replace(queue, index=queue.index + 1)
    return moved, moved.current


def skip_previous(queue: PlaybackQueue) -> tuple[PlaybackQueue, Optional[Track]]:
    """Move to the previous entry; no-op (None) when disengaged or at the start."""
    if queue.index is None or queue.index == 0:
        return queue, None
    moved = replace(queue, index=queue.index - 1)
    return moved, moved.current


def advance(queue: PlaybackQueue, wrap: bool = False) -> tuple[PlaybackQueue, Optional[Track]]:
    """Auto-advance after the current track ended.

    Past the end, the queue disengages unless wrap is set, in which case it
    starts again from the first entry.
    """
    if queue.index is None:
        return queue, None
    if queue.index + 1 < len(queue.tracks):
        moved = replace(queue, index=queue.index + 1)
        return moved, moved.current
    if wrap and queue.tracks:
        moved = replace(queue, index=0)
        return moved, moved.current
    return PlaybackQueue(), None
