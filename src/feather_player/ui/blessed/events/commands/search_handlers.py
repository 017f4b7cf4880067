"""Song search and remote playlist search handlers."""

from dataclasses import replace

from loguru import logger

from feather_player.context import AppContext
from feather_player.domain.playback.queue import bind_queue
from feather_player.domain.provider.exceptions import (
    NetworkError,
    ProviderError,
    RateLimitedError,
)
from feather_player.messages import (
    PlaylistExpanded,
    PlaylistExpandFailed,
    PlaylistSearchCompleted,
    PlaylistSearchFailed,
    SearchCompleted,
    SearchFailed,
)
from feather_player.ui.blessed.helpers.scrolling import move_selection, turn_page
from feather_player.ui.blessed.state import (
    Action,
    Focus,
    Mode,
    Pane,
    UIState,
    edit_text,
    set_feedback,
)

from .playback_handlers import start_playback


def describe_provider_error(error: Exception) -> str:
    """Status-area text for a failed search; retryable errors say so."""
    if isinstance(error, (NetworkError, RateLimitedError)):
        return f"{error} (press Enter to retry)"
    return str(error)


# -----------------------------------------------------------------------------
# Song search
# -----------------------------------------------------------------------------


def handle_search_edit(state: UIState, action: Action, char: str = "") -> UIState:
    search = state.search
    return replace(state, search=replace(search, query=edit_text(search.query, action, char)))


def submit_search(ctx: AppContext, state: UIState) -> UIState:
    """Issue a song search for the current query under a new generation."""
    query = state.search.query.strip()
    if not query:
        return set_feedback(state, "Type something to search", "warning")

    generation = state.search.generation + 1
    provider = ctx.provider

    def job():
        try:
            tracks = provider.search(query)
        except ProviderError as e:
            return SearchFailed(generation, query, e)
        return SearchCompleted(generation, query, tuple(tracks))

    ctx.jobs.submit(f"search:{generation}", job)
    search = replace(state.search, generation=generation, loading=True, error=None)
    return replace(state, search=search)


def handle_search_completed(ctx: AppContext, state: UIState, msg: SearchCompleted) -> UIState:
    if msg.generation != state.search.generation:
        logger.debug(f"Discarding stale search results for {msg.query!r}")
        return state

    search = replace(
        state.search,
        results=msg.tracks,
        selected=0,
        loading=False,
        error=None,
        focus=Focus.RESULTS,
    )
    return replace(state, search=search)


def handle_search_failed(ctx: AppContext, state: UIState, msg: SearchFailed) -> UIState:
    if msg.generation != state.search.generation:
        logger.debug(f"Discarding stale search failure for {msg.query!r}")
        return state

    logger.warning(f"Search {msg.query!r} failed: {msg.error}")
    search = replace(
        state.search,
        results=(),
        selected=0,
        loading=False,
        error=describe_provider_error(msg.error),
        focus=Focus.INPUT,
    )
    return replace(state, search=search)


def move_search_cursor(state: UIState, delta: int) -> UIState:
    search = state.search
    selected = move_selection(search.selected, delta, len(search.results))
    return replace(state, search=replace(search, selected=selected))


def play_search_result(ctx: AppContext, state: UIState) -> UIState:
    results = state.search.results
    if not results:
        return state
    return start_playback(ctx, state, results[state.search.selected])


def toggle_search_focus(state: UIState) -> UIState:
    search = state.search
    focus = Focus.RESULTS if search.focus == Focus.INPUT else Focus.INPUT
    return replace(state, search=replace(search, focus=focus))


# -----------------------------------------------------------------------------
# Playlist search
# -----------------------------------------------------------------------------


def handle_playlist_query_edit(state: UIState, action: Action, char: str = "") -> UIState:
    playlists = state.playlists
    query = edit_text(playlists.query, action, char)
    return replace(state, playlists=replace(playlists, query=query))


def submit_playlist_search(ctx: AppContext, state: UIState) -> UIState:
    query = state.playlists.query.strip()
    if not query:
        return set_feedback(state, "Type something to search", "warning")

    generation = state.playlists.generation + 1
    provider = ctx.provider

    def job():
        try:
            playlists = provider.search_playlists(query)
        except ProviderError as e:
            return PlaylistSearchFailed(generation, query, e)
        return PlaylistSearchCompleted(generation, query, tuple(playlists))

    ctx.jobs.submit(f"playlist-search:{generation}", job)
    playlists = replace(state.playlists, generation=generation, loading=True, error=None)
    return replace(state, playlists=playlists)


def handle_playlist_search_completed(
    ctx: AppContext, state: UIState, msg: PlaylistSearchCompleted
) -> UIState:
    if msg.generation != state.playlists.generation:
        logger.debug(f"Discarding stale playlist results for {msg.query!r}")
        return state
    playlists = replace(
        state.playlists,
        results=msg.playlists,
        selected=0,
        loading=False,
        error=None,
        focus=Focus.RESULTS,
    )
    return replace(state, playlists=playlists)


def handle_playlist_search_failed(
    ctx: AppContext, state: UIState, msg: PlaylistSearchFailed
) -> UIState:
    if msg.generation != state.playlists.generation:
        logger.debug(f"Discarding stale playlist search failure for {msg.query!r}")
        return state
    logger.warning(f"Playlist search {msg.query!r} failed: {msg.error}")
    playlists = replace(
        state.playlists,
        results=(),
        selected=0,
        loading=False,
        error=describe_provider_error(msg.error),
        focus=Focus.INPUT,
    )
    return replace(state, playlists=playlists)


def open_remote_playlist(ctx: AppContext, state: UIState) -> UIState:
    """Expand the selected search result and switch to the view pane."""
    playlists = state.playlists
    if not playlists.results:
        return state

    ref = playlists.results[playlists.selected]
    generation = playlists.view_generation + 1
    provider = ctx.provider

    def job():
        try:
            tracks = provider.expand_playlist_reference(ref.url)
        except ProviderError as e:
            return PlaylistExpandFailed(generation, ref, e)
        return PlaylistExpanded(generation, ref, tuple(tracks))

    ctx.jobs.submit(f"expand:{ref.id}", job)
    playlists = replace(
        playlists,
        pane=Pane.VIEW,
        opened=ref,
        tracks=(),
        track_selected=0,
        view_generation=generation,
        view_loading=True,
        view_error=None,
    )
    return replace(state, playlists=playlists)


def handle_playlist_expanded(ctx: AppContext, state: UIState, msg: PlaylistExpanded) -> UIState:
    if msg.generation != state.playlists.view_generation:
        logger.debug(f"Discarding stale expansion of {msg.playlist.title!r}")
        return state
    playlists = replace(
        state.playlists,
        tracks=msg.tracks,
        track_selected=0,
        view_loading=False,
        view_error=None,
    )
    return replace(state, playlists=playlists)


def handle_playlist_expand_failed(
    ctx: AppContext, state: UIState, msg: PlaylistExpandFailed
) -> UIState:
    if msg.generation != state.playlists.view_generation:
        logger.debug(f"Discarding stale expansion failure of {msg.playlist.title!r}")
        return state
    logger.warning(f"Expanding {msg.playlist.url} failed: {msg.error}")
    playlists = replace(
        state.playlists, view_loading=False, view_error=str(msg.error)
    )
    return replace(state, playlists=playlists)


def move_playlist_cursor(state: UIState, delta: int) -> UIState:
    playlists = state.playlists
    if playlists.pane == Pane.LIST:
        selected = move_selection(playlists.selected, delta, len(playlists.results))
        return replace(state, playlists=replace(playlists, selected=selected))
    selected = move_selection(playlists.track_selected, delta, len(playlists.tracks))
    return replace(state, playlists=replace(playlists, track_selected=selected))


def page_playlist_view(state: UIState, direction: int, page_size: int) -> UIState:
    playlists = state.playlists
    if playlists.pane != Pane.VIEW:
        return state
    selected = turn_page(
        playlists.track_selected, direction, len(playlists.tracks), page_size
    )
    return replace(state, playlists=replace(playlists, track_selected=selected))


def play_remote_playlist(ctx: AppContext, state: UIState, from_selected: bool) -> UIState:
    """Auto-play the opened playlist from the top or from the selected row."""
    playlists = state.playlists
    if playlists.pane != Pane.VIEW or not playlists.tracks:
        return state
    index = playlists.track_selected if from_selected else 0
    source = playlists.opened.title if playlists.opened else ""
    queue = bind_queue(playlists.tracks, index, source=source)
    return start_playback(ctx, state, queue.current, queue)


def toggle_playlist_focus(state: UIState) -> UIState:
    playlists = state.playlists
    if playlists.pane != Pane.LIST:
        return state
    focus = Focus.RESULTS if playlists.focus == Focus.INPUT else Focus.INPUT
    return replace(state, playlists=replace(playlists, focus=focus))


def toggle_playlist_pane(state: UIState) -> UIState:
    playlists = state.playlists
    pane = Pane.VIEW if playlists.pane == Pane.LIST else Pane.LIST
    return replace(state, playlists=replace(playlists, pane=pane))


def toggle_search_kind(state: UIState) -> UIState:
    """Switch between song search and playlist search."""
    target = Mode.PLAYLIST if state.mode == Mode.SEARCH else Mode.SEARCH
    return replace(state, mode=target, search_kind=target)
