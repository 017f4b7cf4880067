"""Playback exceptions."""

from feather_player.core.exceptions import FeatherError


class PlayerProcessError(FeatherError):
    """Raised when the mpv process cannot be started or stops responding."""

    pass


class LoadError(PlayerProcessError):
    """Raised when mpv cannot open a stream locator."""

    pass
