"""Keyboard event routing for all modes.

Lookup order: open popup, pending leader sequence, the leader key itself,
focused query input, global keys, then the active mode's table. Only the
playlist-name popup captures every key; the search query input still lets
the leader through. Keys nobody claims produce an empty command list.
"""

from dataclasses import replace

from blessed.keyboard import Keystroke
from loguru import logger

from feather_player.core.config import KeysConfig
from feather_player.ui.blessed.state import (
    Action,
    Command,
    Mode,
    UIState,
    text_input_focused,
)

from .keys import (
    handle_history_key,
    handle_player_key,
    handle_playlist_key,
    handle_popup_key,
    handle_search_key,
    handle_user_playlist_key,
    parse_key,
)

HELP_KEY = "?"


def leader_targets(keys: KeysConfig) -> dict[str, Command]:
    """Second keys of a leader sequence and the commands they produce."""
    return {
        keys.quit: Command(Action.QUIT),
        keys.search: Command(Action.SWITCH_MODE, Mode.SEARCH),
        keys.history: Command(Action.SWITCH_MODE, Mode.HISTORY),
        keys.player: Command(Action.SWITCH_MODE, Mode.PLAYER),
        keys.userplaylist: Command(Action.SWITCH_MODE, Mode.USER_PLAYLIST),
        keys.home: Command(Action.SWITCH_MODE, Mode.HOME),
    }


def detect_mode(state: UIState) -> str:
    """
    Detect which key table handles the next key.

    Returns:
        "popup", "leader", "text_input" or the active mode's value
    """
    if state.popup is not None:
        return "popup"
    if state.pending_leader:
        return "leader"
    if text_input_focused(state):
        return "text_input"
    return state.mode.value


def _handle_mode_key(state: UIState, event: dict) -> list[Command]:
    match state.mode:
        case Mode.SEARCH:
            return handle_search_key(state, event)
        case Mode.PLAYLIST:
            return handle_playlist_key(state, event)
        case Mode.USER_PLAYLIST:
            return handle_user_playlist_key(state, event)
        case Mode.HISTORY:
            return handle_history_key(state, event)
        case Mode.PLAYER:
            return handle_player_key(state, event)
    return []


def route_key(
    state: UIState, key: Keystroke, keys: KeysConfig
) -> tuple[UIState, list[Command]]:
    """
    Map a raw key to commands for the state machine.

    The only state this changes is the pending-leader flag. Never raises
    for unknown keys.

    Args:
        state: Current UI state
        key: blessed Keystroke
        keys: Leader key bindings

    Returns:
        Tuple of (state with updated leader flag, commands)
    """
    event = parse_key(key)

    if event["type"] == "ctrl_c":
        return replace(state, pending_leader=False), [Command(Action.QUIT)]

    match detect_mode(state):
        case "popup":
            return state, handle_popup_key(state, event)

        case "leader":
            state = replace(state, pending_leader=False)
            command = leader_targets(keys).get(event["char"]) if event["char"] else None
            if command is None:
                logger.debug(f"Leader sequence cancelled by {event['type']}")
                return state, []
            return state, [command]

    if event["char"] == keys.leader:
        return replace(state, pending_leader=True), []

    if text_input_focused(state):
        return state, _handle_mode_key(state, event)

    if event["char"] == HELP_KEY:
        return state, [Command(Action.TOGGLE_HELP)]

    if state.show_help and event["type"] == "escape":
        return state, [Command(Action.TOGGLE_HELP)]

    return state, _handle_mode_key(state, event)
