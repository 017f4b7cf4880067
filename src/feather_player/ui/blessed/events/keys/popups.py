"""Popup key handling.

An open popup is modal: it owns every key, and only its confirm and cancel
keys close it.
"""

from feather_player.ui.blessed.state import (
    Action,
    AddToPlaylistPopup,
    Command,
    ConfirmDeletePopup,
    NamePopup,
    UIState,
)

from .utils import navigation_command


def handle_name_popup_key(event: dict) -> list[Command]:
    """Playlist-name input: every printable key is typed verbatim."""
    match event["type"]:
        case "char":
            return [Command(Action.INSERT_CHAR, event["char"])]
        case "backspace":
            return [Command(Action.DELETE_CHAR)]
        case "enter":
            return [Command(Action.SELECT)]
        case "escape":
            return [Command(Action.CANCEL)]
    return []


def handle_add_to_playlist_key(event: dict) -> list[Command]:
    if event["type"] == "enter":
        return [Command(Action.SELECT)]
    if event["type"] == "escape":
        return [Command(Action.CANCEL)]
    return navigation_command(event)


def handle_confirm_delete_key(event: dict) -> list[Command]:
    if event["type"] == "enter":
        return [Command(Action.SELECT)]
    if event["type"] == "escape" or event["char"] in ("n", "N"):
        return [Command(Action.CANCEL)]
    if event["char"] in ("y", "Y"):
        return [Command(Action.SELECT, True)]
    if event["type"] in ("tab", "arrow_left", "arrow_right") or event["char"] in ("h", "l"):
        return [Command(Action.TOGGLE_CHOICE)]
    return []


def handle_popup_key(state: UIState, event: dict) -> list[Command]:
    match state.popup:
        case NamePopup():
            return handle_name_popup_key(event)
        case AddToPlaylistPopup():
            return handle_add_to_playlist_key(event)
        case ConfirmDeletePopup():
            return handle_confirm_delete_key(event)
    return []
