"""History and Home view handlers."""

from dataclasses import replace

from loguru import logger

from feather_player.context import AppContext
from feather_player.core import database
from feather_player.core.exceptions import PersistenceError
from feather_player.ui.blessed.helpers.scrolling import clamp_selection, move_selection, turn_page
from feather_player.ui.blessed.state import (
    HomeState,
    UIState,
    set_feedback,
)

from .playback_handlers import start_playback


def load_history(state: UIState) -> UIState:
    """Reload history entries, most recent first."""
    try:
        entries = tuple(database.list_history())
    except PersistenceError as e:
        logger.error(f"Failed to load history: {e}")
        return set_feedback(state, f"Could not load history: {e}", "error")

    selected = clamp_selection(state.history.selected, len(entries))
    return replace(state, history=replace(state.history, entries=entries, selected=selected))


def load_home(state: UIState) -> UIState:
    """Refresh last played track, listening stats and playlist count."""
    try:
        home = HomeState(
            last_played=database.get_last_played(),
            stats=database.get_listening_stats(),
            playlist_count=len(database.list_playlists()),
        )
    except PersistenceError as e:
        logger.error(f"Failed to load home data: {e}")
        return set_feedback(state, f"Could not load library: {e}", "error")
    return replace(state, home=home)


def move_history_cursor(state: UIState, delta: int) -> UIState:
    history = state.history
    selected = move_selection(history.selected, delta, len(history.entries))
    return replace(state, history=replace(history, selected=selected))


def page_history(state: UIState, direction: int, page_size: int) -> UIState:
    history = state.history
    selected = turn_page(history.selected, direction, len(history.entries), page_size)
    return replace(state, history=replace(history, selected=selected))


def play_history_entry(ctx: AppContext, state: UIState) -> UIState:
    entries = state.history.entries
    if not entries:
        return state
    return start_playback(ctx, state, entries[state.history.selected].track)


def delete_history_entry(state: UIState) -> UIState:
    entries = state.history.entries
    if not entries:
        return state

    entry = entries[state.history.selected]
    try:
        database.delete_history_entry(entry.track.id)
    except PersistenceError as e:
        return set_feedback(state, f"Could not delete entry: {e}", "error")

    state = load_history(state)
    return set_feedback(state, f"Removed from history: {entry.track.title}", "success")
