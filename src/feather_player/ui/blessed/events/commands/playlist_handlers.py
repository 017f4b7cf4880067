"""User playlist handlers: create, delete, open, add and remove tracks."""

from dataclasses import replace
from typing import Optional

from loguru import logger

from feather_player.context import AppContext
from feather_player.core import database
from feather_player.core.exceptions import (
    PersistenceError,
    PlaylistNotFoundError,
    UserInputError,
)
from feather_player.domain.library.models import Track
from feather_player.domain.playback.queue import bind_queue
from feather_player.ui.blessed.helpers.scrolling import clamp_selection, move_selection, turn_page
from feather_player.ui.blessed.state import (
    Action,
    AddToPlaylistPopup,
    ConfirmDeletePopup,
    Focus,
    Mode,
    NamePopup,
    Pane,
    UIState,
    body_mode,
    edit_text,
    set_feedback,
)

from .playback_handlers import start_playback


def load_playlist_names(state: UIState, select: Optional[str] = None) -> UIState:
    """Reload playlist names, optionally moving the cursor onto one."""
    try:
        names = tuple(database.list_playlists())
    except PersistenceError as e:
        logger.error(f"Failed to load playlists: {e}")
        return set_feedback(state, f"Could not load playlists: {e}", "error")

    user = state.user_playlists
    if select is not None and select in names:
        selected = names.index(select)
    else:
        selected = clamp_selection(user.selected, len(names))

    opened = user.opened if user.opened in names else None
    user = replace(user, names=names, selected=selected, opened=opened)
    if opened is None:
        user = replace(user, pane=Pane.LIST, tracks=(), track_selected=0)
    return replace(state, user_playlists=user)


def _load_playlist_tracks(state: UIState, name: str) -> UIState:
    try:
        tracks = tuple(database.get_playlist(name))
    except PlaylistNotFoundError as e:
        state = set_feedback(state, str(e), "error")
        return load_playlist_names(replace(state, user_playlists=replace(state.user_playlists, opened=None)))
    except PersistenceError as e:
        return set_feedback(state, f"Could not open playlist: {e}", "error")

    user = state.user_playlists
    selected = clamp_selection(user.track_selected, len(tracks)) if user.opened == name else 0
    user = replace(user, opened=name, tracks=tracks, track_selected=selected, pane=Pane.VIEW)
    return replace(state, user_playlists=user)


def open_user_playlist(state: UIState) -> UIState:
    user = state.user_playlists
    if not user.names:
        return set_feedback(state, "No playlists yet; press ` to create one", "info")
    return _load_playlist_tracks(state, user.names[user.selected])


def move_user_playlist_cursor(state: UIState, delta: int) -> UIState:
    user = state.user_playlists
    if user.pane == Pane.LIST:
        selected = move_selection(user.selected, delta, len(user.names))
        return replace(state, user_playlists=replace(user, selected=selected))
    selected = move_selection(user.track_selected, delta, len(user.tracks))
    return replace(state, user_playlists=replace(user, track_selected=selected))


def page_user_playlist(state: UIState, direction: int, page_size: int) -> UIState:
    user = state.user_playlists
    if user.pane != Pane.VIEW:
        return state
    selected = turn_page(user.track_selected, direction, len(user.tracks), page_size)
    return replace(state, user_playlists=replace(user, track_selected=selected))


def toggle_user_playlist_pane(state: UIState) -> UIState:
    user = state.user_playlists
    if user.pane == Pane.VIEW:
        return replace(state, user_playlists=replace(user, pane=Pane.LIST))
    if user.opened is None:
        return open_user_playlist(state)
    return replace(state, user_playlists=replace(user, pane=Pane.VIEW))


def play_user_playlist(ctx: AppContext, state: UIState, from_selected: bool) -> UIState:
    """Auto-play the opened playlist from the top or from the selected row."""
    user = state.user_playlists
    if user.pane != Pane.VIEW or not user.tracks:
        return state
    index = user.track_selected if from_selected else 0
    queue = bind_queue(user.tracks, index, source=user.opened or "")
    return start_playback(ctx, state, queue.current, queue)


def remove_selected_track(state: UIState) -> UIState:
    user = state.user_playlists
    if user.pane != Pane.VIEW or not user.tracks or user.opened is None:
        return state

    track = user.tracks[user.track_selected]
    try:
        database.remove_track_from_playlist(user.opened, track.id)
    except (PlaylistNotFoundError, PersistenceError) as e:
        return set_feedback(state, f"Could not remove track: {e}", "error")

    state = _load_playlist_tracks(state, user.opened)
    return set_feedback(state, f"Removed {track.title} from {user.opened}", "success")


# -----------------------------------------------------------------------------
# Popups
# -----------------------------------------------------------------------------


def open_create_popup(state: UIState) -> UIState:
    return replace(state, popup=NamePopup())


def edit_popup_name(state: UIState, action: Action, char: str = "") -> UIState:
    popup = state.popup
    if not isinstance(popup, NamePopup):
        return state
    return replace(state, popup=replace(popup, text=edit_text(popup.text, action, char), error=None))


def confirm_create_playlist(state: UIState) -> UIState:
    """Create the playlist named in the popup; errors keep the popup open."""
    popup = state.popup
    try:
        database.create_playlist(popup.text)
    except UserInputError as e:
        return replace(state, popup=replace(popup, error=str(e)))
    except PersistenceError as e:
        return replace(state, popup=replace(popup, error=f"Could not save: {e}"))

    name = popup.text.strip()
    logger.info(f"Created playlist {name!r}")
    state = replace(state, popup=None)
    state = load_playlist_names(state, select=name)
    return set_feedback(state, f"Created playlist {name}", "success")


def open_delete_popup(state: UIState) -> UIState:
    user = state.user_playlists
    if not user.names:
        return state
    return replace(state, popup=ConfirmDeletePopup(name=user.names[user.selected]))


def toggle_delete_choice(state: UIState) -> UIState:
    popup = state.popup
    if not isinstance(popup, ConfirmDeletePopup):
        return state
    return replace(state, popup=replace(popup, confirm=not popup.confirm))


def confirm_delete_playlist(state: UIState, force: bool = False) -> UIState:
    """Delete the playlist when confirmed; a declined choice just closes."""
    popup = state.popup
    state = replace(state, popup=None)
    if not (force or popup.confirm):
        return state

    try:
        database.delete_playlist(popup.name)
    except PlaylistNotFoundError as e:
        state = set_feedback(state, str(e), "error")
    except PersistenceError as e:
        return set_feedback(state, f"Could not delete playlist: {e}", "error")
    else:
        logger.info(f"Deleted playlist {popup.name!r}")
        state = set_feedback(state, f"Deleted playlist {popup.name}", "success")
    return load_playlist_names(state)


def selected_track(state: UIState) -> Optional[Track]:
    """Track under the cursor in the displayed body, if any."""
    match body_mode(state):
        case Mode.SEARCH:
            search = state.search
            if search.focus == Focus.RESULTS and search.results:
                return search.results[search.selected]
        case Mode.PLAYLIST:
            playlists = state.playlists
            if playlists.pane == Pane.VIEW and playlists.tracks:
                return playlists.tracks[playlists.track_selected]
        case Mode.USER_PLAYLIST:
            user = state.user_playlists
            if user.pane == Pane.VIEW and user.tracks:
                return user.tracks[user.track_selected]
        case Mode.HISTORY:
            history = state.history
            if history.entries:
                return history.entries[history.selected].track
    return None


def open_add_popup(state: UIState) -> UIState:
    track = selected_track(state)
    if track is None:
        return state
    try:
        names = tuple(database.list_playlists())
    except PersistenceError as e:
        return set_feedback(state, f"Could not load playlists: {e}", "error")
    if not names:
        return set_feedback(state, "Create a playlist first (:u then `)", "warning")
    return replace(state, popup=AddToPlaylistPopup(track=track, names=names))


def move_add_popup_cursor(state: UIState, delta: int) -> UIState:
    popup = state.popup
    selected = move_selection(popup.selected, delta, len(popup.names))
    return replace(state, popup=replace(popup, selected=selected))


def confirm_add_to_playlist(state: UIState) -> UIState:
    popup = state.popup
    name = popup.names[popup.selected]
    try:
        database.add_track_to_playlist(name, popup.track)
    except UserInputError as e:
        return replace(state, popup=replace(popup, error=str(e)))
    except PersistenceError as e:
        return replace(state, popup=replace(popup, error=f"Could not save: {e}"))

    logger.info(f"Added {popup.track.id} to playlist {name!r}")
    state = replace(state, popup=None)
    if state.user_playlists.opened == name:
        pane = state.user_playlists.pane
        state = _load_playlist_tracks(state, name)
        state = replace(state, user_playlists=replace(state.user_playlists, pane=pane))
    return set_feedback(state, f"Added {popup.track.title} to {name}", "success")
