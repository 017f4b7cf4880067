"""Search and playlist-search key handling."""

from feather_player.ui.blessed.state import (
    Action,
    Command,
    Focus,
    Pane,
    UIState,
)

from .utils import navigation_command, paging_command

SEARCH_KIND_KEY = ";"
PANE_KEY = "["


def handle_query_input_key(event: dict) -> list[Command]:
    """Focused query field: characters go in verbatim, except the kind switch."""
    if event["char"] == SEARCH_KIND_KEY:
        return [Command(Action.TOGGLE_SEARCH_KIND)]
    match event["type"]:
        case "char":
            return [Command(Action.INSERT_CHAR, event["char"])]
        case "backspace":
            return [Command(Action.DELETE_CHAR)]
        case "enter":
            return [Command(Action.SELECT)]
        case "tab" | "escape" | "arrow_down":
            return [Command(Action.TOGGLE_FOCUS)]
    return []


def handle_search_key(state: UIState, event: dict) -> list[Command]:
    """Song search with the results list focused."""
    if state.search.focus == Focus.INPUT:
        return handle_query_input_key(event)

    if event["type"] == "tab":
        return [Command(Action.TOGGLE_FOCUS)]
    if event["type"] == "enter":
        return [Command(Action.SELECT)]
    if event["char"] == "a":
        return [Command(Action.ADD_TO_PLAYLIST)]
    if event["char"] == SEARCH_KIND_KEY:
        return [Command(Action.TOGGLE_SEARCH_KIND)]
    return navigation_command(event)


def handle_playlist_key(state: UIState, event: dict) -> list[Command]:
    """Playlist search: list pane (query + results) or the opened playlist."""
    playlists = state.playlists

    if playlists.pane == Pane.LIST and playlists.focus == Focus.INPUT:
        return handle_query_input_key(event)

    if event["char"] == PANE_KEY:
        return [Command(Action.TOGGLE_PANE)]
    if event["char"] == SEARCH_KIND_KEY:
        return [Command(Action.TOGGLE_SEARCH_KIND)]

    if playlists.pane == Pane.LIST:
        if event["type"] == "tab":
            return [Command(Action.TOGGLE_FOCUS)]
        if event["type"] == "enter":
            return [Command(Action.SELECT)]
        return navigation_command(event)

    # Opened playlist view
    if event["type"] == "escape":
        return [Command(Action.TOGGLE_PANE)]
    if event["type"] == "enter":
        return [Command(Action.SELECT)]
    if event["char"] == "p":
        return [Command(Action.PLAY_ALL)]
    if event["char"] == "a":
        return [Command(Action.ADD_TO_PLAYLIST)]
    return navigation_command(event) or paging_command(event)
