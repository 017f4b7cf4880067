"""Provider client protocol consumed by the UI state machine."""

from typing import Protocol

from feather_player.domain.library.models import PlaylistRef, Track


class ProviderClient(Protocol):
    """Remote content source.

    Every method blocks; callers run them on the background job runner.
    """

    def search(self, query: str) -> list[Track]:
        """Search songs.

        Raises:
            NotFoundError, NetworkError, RateLimitedError
        """
        ...

    def search_playlists(self, query: str) -> list[PlaylistRef]:
        """Search playlists.

        Raises:
            NotFoundError, NetworkError, RateLimitedError
        """
        ...

    def resolve_playable_source(self, track: Track) -> str:
        """Return an opaque stream locator the player can open.

        Raises:
            RestrictedError, NetworkError, NotFoundError
        """
        ...

    def expand_playlist_reference(self, locator: str) -> list[Track]:
        """Return the tracks of a remote playlist, with 1-based positions.

        Raises:
            NotFoundError, NetworkError, RateLimitedError
        """
        ...
