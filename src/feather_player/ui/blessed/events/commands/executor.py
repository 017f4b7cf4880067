"""Command execution logic.

execute_command applies one routed Command; handle_message applies one
background result from the inbox. Both are the only places UIState changes
in response to the outside world.
"""

from dataclasses import replace
from typing import Any, Callable

from loguru import logger

from feather_player.context import AppContext
from feather_player.messages import (
    JobFailed,
    Message,
    PlaybackTick,
    PlayerCrashed,
    PlaylistExpanded,
    PlaylistExpandFailed,
    PlaylistSearchCompleted,
    PlaylistSearchFailed,
    SearchCompleted,
    SearchFailed,
    SourceFailed,
    SourceResolved,
    TrackLoaded,
    TrackLoadFailed,
)
from feather_player.ui.blessed.state import (
    Action,
    AddToPlaylistPopup,
    Command,
    ConfirmDeletePopup,
    Focus,
    Mode,
    NamePopup,
    Pane,
    PlaybackStatus,
    UIState,
    set_feedback,
)

from . import history_handlers as history
from . import playback_handlers as playback
from . import playlist_handlers as user_playlists
from . import search_handlers as search

# Type alias for command handlers
HandlerResult = tuple[AppContext, UIState, bool]
CommandHandler = Callable[[AppContext, UIState, Any], HandlerResult]


# -----------------------------------------------------------------------------
# Mode switching
# -----------------------------------------------------------------------------


def switch_mode(state: UIState, target: Mode) -> UIState:
    """Enter a mode, refreshing whatever it shows from the database."""
    if target == Mode.SEARCH:
        # The Search leader key returns to whichever search was used last
        target = state.search_kind

    previous = state.previous_mode
    if target == Mode.PLAYER and state.mode != Mode.PLAYER:
        previous = state.mode

    state = replace(
        state,
        mode=target,
        previous_mode=previous,
        popup=None,
        show_help=False,
        pending_leader=False,
    )
    logger.debug(f"Switched to {target.value} mode")

    match target:
        case Mode.HOME:
            return history.load_home(state)
        case Mode.HISTORY:
            return history.load_history(state)
        case Mode.USER_PLAYLIST:
            return user_playlists.load_playlist_names(state)
    return state


# -----------------------------------------------------------------------------
# Command handlers
# Each has signature: (ctx, state, value) -> (AppContext, UIState, should_quit)
# -----------------------------------------------------------------------------


def _handle_quit(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    return ctx, state, True


def _handle_switch_mode(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    return ctx, switch_mode(state, value), False


def _handle_toggle_help(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    return ctx, replace(state, show_help=not state.show_help), False


def _handle_navigate(delta: int) -> CommandHandler:
    def handler(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
        if isinstance(state.popup, AddToPlaylistPopup):
            return ctx, user_playlists.move_add_popup_cursor(state, delta), False

        match state.mode:
            case Mode.SEARCH:
                state = search.move_search_cursor(state, delta)
            case Mode.PLAYLIST:
                state = search.move_playlist_cursor(state, delta)
            case Mode.USER_PLAYLIST:
                state = user_playlists.move_user_playlist_cursor(state, delta)
            case Mode.HISTORY:
                state = history.move_history_cursor(state, delta)
        return ctx, state, False

    return handler


def _handle_page(direction: int) -> CommandHandler:
    def handler(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
        page_size = ctx.config.library.page_size
        match state.mode:
            case Mode.PLAYLIST:
                state = search.page_playlist_view(state, direction, page_size)
            case Mode.USER_PLAYLIST:
                state = user_playlists.page_user_playlist(state, direction, page_size)
            case Mode.HISTORY:
                state = history.page_history(state, direction, page_size)
        return ctx, state, False

    return handler


def _handle_text_edit(ctx: AppContext, state: UIState, cmd: Command) -> HandlerResult:
    char = cmd.value or ""
    if isinstance(state.popup, NamePopup):
        state = user_playlists.edit_popup_name(state, cmd.action, char)
    elif state.mode == Mode.SEARCH:
        state = search.handle_search_edit(state, cmd.action, char)
    elif state.mode == Mode.PLAYLIST:
        state = search.handle_playlist_query_edit(state, cmd.action, char)
    return ctx, state, False


def _handle_select(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    """Enter: confirm a popup, submit a query or play/open the selection."""
    match state.popup:
        case NamePopup():
            return ctx, user_playlists.confirm_create_playlist(state), False
        case AddToPlaylistPopup():
            return ctx, user_playlists.confirm_add_to_playlist(state), False
        case ConfirmDeletePopup():
            return ctx, user_playlists.confirm_delete_playlist(state, force=value is True), False

    match state.mode:
        case Mode.SEARCH:
            if state.search.focus == Focus.INPUT:
                state = search.submit_search(ctx, state)
            else:
                state = search.play_search_result(ctx, state)
        case Mode.PLAYLIST:
            playlists = state.playlists
            if playlists.pane == Pane.VIEW:
                state = search.play_remote_playlist(ctx, state, from_selected=True)
            elif playlists.focus == Focus.INPUT:
                state = search.submit_playlist_search(ctx, state)
            else:
                state = search.open_remote_playlist(ctx, state)
        case Mode.USER_PLAYLIST:
            if state.user_playlists.pane == Pane.VIEW:
                state = user_playlists.play_user_playlist(ctx, state, from_selected=True)
            else:
                state = user_playlists.open_user_playlist(state)
        case Mode.HISTORY:
            state = history.play_history_entry(ctx, state)
    return ctx, state, False


def _handle_play_all(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    match state.mode:
        case Mode.PLAYLIST:
            state = search.play_remote_playlist(ctx, state, from_selected=False)
        case Mode.USER_PLAYLIST:
            state = user_playlists.play_user_playlist(ctx, state, from_selected=False)
    return ctx, state, False


def _handle_toggle_focus(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    match state.mode:
        case Mode.SEARCH:
            state = search.toggle_search_focus(state)
        case Mode.PLAYLIST:
            state = search.toggle_playlist_focus(state)
    return ctx, state, False


def _handle_toggle_pane(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    match state.mode:
        case Mode.PLAYLIST:
            state = search.toggle_playlist_pane(state)
        case Mode.USER_PLAYLIST:
            state = user_playlists.toggle_user_playlist_pane(state)
    return ctx, state, False


def _handle_toggle_search_kind(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    return ctx, search.toggle_search_kind(state), False


def _handle_toggle_choice(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    return ctx, user_playlists.toggle_delete_choice(state), False


def _handle_cancel(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    return ctx, replace(state, popup=None), False


def _handle_create_playlist(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    return ctx, user_playlists.open_create_popup(state), False


def _handle_delete(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    match state.mode:
        case Mode.USER_PLAYLIST:
            if state.user_playlists.pane == Pane.VIEW:
                state = user_playlists.remove_selected_track(state)
            else:
                state = user_playlists.open_delete_popup(state)
        case Mode.HISTORY:
            state = history.delete_history_entry(state)
    return ctx, state, False


def _handle_add_to_playlist(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    return ctx, user_playlists.open_add_popup(state), False


def _handle_toggle_pause(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
    return ctx, playback.handle_toggle_pause(ctx, state), False


def _handle_volume(direction: int) -> CommandHandler:
    def handler(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
        return ctx, playback.handle_volume(ctx, state, direction), False

    return handler


def _handle_seek(direction: int) -> CommandHandler:
    def handler(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
        return ctx, playback.handle_seek(ctx, state, direction), False

    return handler


def _handle_skip(direction: int) -> CommandHandler:
    def handler(ctx: AppContext, state: UIState, value: Any) -> HandlerResult:
        return ctx, playback.handle_skip(ctx, state, direction), False

    return handler


COMMAND_HANDLERS: dict[Action, CommandHandler] = {
    Action.QUIT: _handle_quit,
    Action.SWITCH_MODE: _handle_switch_mode,
    Action.TOGGLE_HELP: _handle_toggle_help,
    Action.NAVIGATE_UP: _handle_navigate(-1),
    Action.NAVIGATE_DOWN: _handle_navigate(1),
    Action.NEXT_PAGE: _handle_page(1),
    Action.PREVIOUS_PAGE: _handle_page(-1),
    Action.SELECT: _handle_select,
    Action.PLAY_ALL: _handle_play_all,
    Action.TOGGLE_FOCUS: _handle_toggle_focus,
    Action.TOGGLE_PANE: _handle_toggle_pane,
    Action.TOGGLE_SEARCH_KIND: _handle_toggle_search_kind,
    Action.TOGGLE_CHOICE: _handle_toggle_choice,
    Action.CANCEL: _handle_cancel,
    Action.CREATE_PLAYLIST: _handle_create_playlist,
    Action.DELETE: _handle_delete,
    Action.ADD_TO_PLAYLIST: _handle_add_to_playlist,
    Action.TOGGLE_PAUSE: _handle_toggle_pause,
    Action.VOLUME_UP: _handle_volume(1),
    Action.VOLUME_DOWN: _handle_volume(-1),
    Action.SEEK_FORWARD: _handle_seek(1),
    Action.SEEK_BACKWARD: _handle_seek(-1),
    Action.SKIP_NEXT: _handle_skip(1),
    Action.SKIP_PREVIOUS: _handle_skip(-1),
}


def execute_command(
    ctx: AppContext, state: UIState, cmd: Command
) -> tuple[AppContext, UIState, bool]:
    """
    Execute command and return updated state.

    Args:
        ctx: Application context
        state: UI state
        cmd: Command produced by the key router

    Returns:
        Tuple of (updated AppContext, updated UIState, should_quit)
    """
    if cmd.action in (Action.INSERT_CHAR, Action.DELETE_CHAR):
        return _handle_text_edit(ctx, state, cmd)

    handler = COMMAND_HANDLERS.get(cmd.action)
    if handler is None:
        logger.warning(f"No handler for command {cmd.action}")
        return ctx, state, False
    return handler(ctx, state, cmd.value)


# -----------------------------------------------------------------------------
# Background messages
# -----------------------------------------------------------------------------


def _handle_job_failed(ctx: AppContext, state: UIState, msg: JobFailed) -> UIState:
    """A job crashed outside its own error handling; unstick loading views."""
    state = replace(
        state,
        search=replace(state.search, loading=False),
        playlists=replace(state.playlists, loading=False, view_loading=False),
    )
    if state.playback.status == PlaybackStatus.LOADING:
        state = replace(
            state,
            playback=replace(
                state.playback,
                status=PlaybackStatus.ERROR,
                pending=None,
                error=str(msg.error),
            ),
        )
    return set_feedback(state, f"{msg.name} failed: {msg.error}", "error")


MESSAGE_HANDLERS: dict[type, Callable[[AppContext, UIState, Any], UIState]] = {
    SearchCompleted: search.handle_search_completed,
    SearchFailed: search.handle_search_failed,
    PlaylistSearchCompleted: search.handle_playlist_search_completed,
    PlaylistSearchFailed: search.handle_playlist_search_failed,
    PlaylistExpanded: search.handle_playlist_expanded,
    PlaylistExpandFailed: search.handle_playlist_expand_failed,
    SourceResolved: playback.handle_source_resolved,
    SourceFailed: playback.handle_source_failed,
    TrackLoaded: playback.handle_track_loaded,
    TrackLoadFailed: playback.handle_track_load_failed,
    PlaybackTick: playback.handle_playback_tick,
    PlayerCrashed: playback.handle_player_crashed,
    JobFailed: _handle_job_failed,
}


def handle_message(ctx: AppContext, state: UIState, msg: Message) -> UIState:
    """Apply a background result to the UI state."""
    handler = MESSAGE_HANDLERS.get(type(msg))
    if handler is None:
        logger.warning(f"Unhandled message type {type(msg).__name__}")
        return state
    return handler(ctx, state, msg)
