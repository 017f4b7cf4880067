"""User playlist and history key handling."""

from feather_player.ui.blessed.state import Action, Command, Pane, UIState

from .utils import navigation_command, paging_command

CREATE_PLAYLIST_KEY = "`"
PANE_KEY = "["


def handle_user_playlist_key(state: UIState, event: dict) -> list[Command]:
    pane = state.user_playlists.pane

    if event["char"] == PANE_KEY:
        return [Command(Action.TOGGLE_PANE)]
    if event["char"] == CREATE_PLAYLIST_KEY:
        return [Command(Action.CREATE_PLAYLIST)]
    if event["type"] == "enter":
        return [Command(Action.SELECT)]
    if event["char"] == "d":
        return [Command(Action.DELETE)]

    if pane == Pane.LIST:
        return navigation_command(event)

    if event["type"] == "escape":
        return [Command(Action.TOGGLE_PANE)]
    if event["char"] == "p":
        return [Command(Action.PLAY_ALL)]
    if event["char"] == "a":
        return [Command(Action.ADD_TO_PLAYLIST)]
    return navigation_command(event) or paging_command(event)


def handle_history_key(state: UIState, event: dict) -> list[Command]:
    if event["type"] == "enter":
        return [Command(Action.SELECT)]
    if event["char"] == "a":
        return [Command(Action.ADD_TO_PLAYLIST)]
    if event["char"] == "d":
        return [Command(Action.DELETE)]
    return navigation_command(event) or paging_command(event)
