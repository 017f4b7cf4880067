"""Playback domain - mpv control and the auto-play queue."""

from .controller import PlayerController
from .exceptions import LoadError, PlayerProcessError
from .player import (
    PlayerState,
    PlayerStatus,
    check_mpv_available,
    clamp_seek,
    clamp_volume,
    is_track_finished,
)
from .queue import (
    PlaybackQueue,
    advance,
    bind_queue,
    skip_next,
    skip_previous,
)

__all__ = [
    "PlayerController",
    "LoadError",
    "PlayerProcessError",
    "PlayerState",
    "PlayerStatus",
    "check_mpv_available",
    "clamp_seek",
    "clamp_volume",
    "is_track_finished",
    "PlaybackQueue",
    "advance",
    "bind_queue",
    "skip_next",
    "skip_previous",
]
