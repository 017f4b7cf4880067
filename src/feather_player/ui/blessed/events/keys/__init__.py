"""Keyboard event handlers organized by mode."""

from .library import handle_history_key, handle_user_playlist_key
from .player import handle_player_key
from .popups import handle_popup_key
from .search import handle_playlist_key, handle_search_key
from .utils import parse_key

__all__ = [
    "parse_key",
    "handle_popup_key",
    "handle_search_key",
    "handle_playlist_key",
    "handle_user_playlist_key",
    "handle_history_key",
    "handle_player_key",
]
