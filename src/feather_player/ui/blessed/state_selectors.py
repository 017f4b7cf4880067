"""Pure selectors that turn UIState into what the screen shows.

build_snapshot never touches the terminal, so everything the user can see
(tabs, list rows, player bar, hints, popups) is testable without blessed.
"""

from typing import NamedTuple, Optional

from feather_player.core.config import Config
from feather_player.domain.library.models import (
    Track,
    format_duration,
    format_listening_time,
)
from feather_player.ui.blessed.helpers.scrolling import page_bounds
from feather_player.ui.blessed.state import (
    AddToPlaylistPopup,
    ConfirmDeletePopup,
    Focus,
    Mode,
    NamePopup,
    Pane,
    PlaybackStatus,
    UIState,
    body_mode,
    should_show_feedback,
)

TAB_LABELS = (
    (Mode.HOME, "Home"),
    (Mode.SEARCH, "Search"),
    (Mode.PLAYLIST, "Playlists"),
    (Mode.USER_PLAYLIST, "My Playlists"),
    (Mode.HISTORY, "History"),
    (Mode.PLAYER, "Player"),
)

HELP_ROWS = (
    (":s", "Search (songs / playlists)"),
    (":u", "Your playlists"),
    (":h", "History"),
    (":p", "Player controls"),
    (":;", "Home"),
    (":q / Ctrl-C", "Quit"),
    ("↑↓ / j k", "Move selection"),
    ("←→", "Previous / next page"),
    ("Enter", "Search, open or play"),
    ("Tab", "Switch between input and results"),
    (";", "Songs / playlists search (results focused)"),
    ("[", "Switch list / opened playlist"),
    ("p", "Play opened playlist from the top"),
    ("a", "Add selected track to a playlist"),
    ("`", "New playlist"),
    ("d", "Delete playlist / remove track"),
    ("Space / ;", "Pause / resume (player)"),
    ("n / p", "Next / previous track (player)"),
    ("+ / -", "Volume (player)"),
    ("l / h", "Seek forward / back (player)"),
    ("?", "Toggle this help"),
)


class Row(NamedTuple):
    text: str
    detail: str = ""
    selected: bool = False


class InputView(NamedTuple):
    prompt: str
    text: str
    focused: bool


class BodyView(NamedTuple):
    title: str
    rows: tuple[Row, ...] = ()
    input: Optional[InputView] = None
    message: Optional[str] = None  # loading / error / empty text
    message_level: str = "info"
    page: Optional[str] = None


class PlayerBarView(NamedTuple):
    icon: str
    title: str
    artists: str
    elapsed: str
    total: str
    progress: float
    volume: int
    status: str
    queue: str


class PopupView(NamedTuple):
    title: str
    rows: tuple[Row, ...] = ()
    input: Optional[InputView] = None
    error: Optional[str] = None
    hint: str = ""


class RenderSnapshot(NamedTuple):
    tabs: tuple[tuple[str, bool], ...]
    body: BodyView
    player: PlayerBarView
    hints: str
    feedback: Optional[tuple[str, str]]
    popup: Optional[PopupView]
    help: Optional[tuple[tuple[str, str], ...]]
    pending_leader: bool


def track_row(track: Track, selected: bool, number: Optional[int] = None) -> Row:
    prefix = f"{number:>3}. " if number is not None else ""
    text = f"{prefix}{track.title}"
    if track.artist_line:
        text += f" - {track.artist_line}"
    return Row(text, format_duration(track.duration), selected)


def _paged_rows(items, selected: int, page_size: int, make_row) -> tuple[tuple[Row, ...], Optional[str]]:
    start, end, page, page_count = page_bounds(selected, len(items), page_size)
    rows = tuple(make_row(i, items[i], i == selected) for i in range(start, end))
    page_info = f"Page {page + 1}/{page_count}" if page_count > 1 else None
    return rows, page_info


# -----------------------------------------------------------------------------
# Bodies
# -----------------------------------------------------------------------------


def _home_body(state: UIState) -> BodyView:
    home = state.home
    rows = [Row("Welcome to Feather")]
    if home.last_played is not None:
        track = home.last_played.track
        rows.append(Row(f"Last played: {track.title} - {track.artist_line}"))
    else:
        rows.append(Row("Nothing played yet. Press : then s to search."))
    rows.append(Row(f"Songs played: {home.stats.songs_played}"))
    rows.append(Row(f"Time listened: {format_listening_time(home.stats.seconds_played)}"))
    rows.append(Row(f"Playlists: {home.playlist_count}"))
    return BodyView("Home", tuple(rows))


def _search_body(state: UIState, page_size: int) -> BodyView:
    search = state.search
    focused = search.focus == Focus.INPUT
    input_view = InputView("Search songs: ", search.query, focused)
    select = search.selected if not focused else -1

    rows, page = _paged_rows(
        search.results,
        max(search.selected, 0),
        page_size,
        lambda i, track, _: track_row(track, i == select, i + 1),
    )

    message, level = None, "info"
    if search.loading:
        message = "Searching..."
    elif search.error:
        message, level = search.error, "error"
    elif not search.results and search.generation > 0:
        message = "No results"
    return BodyView("Search", rows, input_view, message, level, page)


def _playlist_body(state: UIState, page_size: int) -> BodyView:
    playlists = state.playlists

    if playlists.pane == Pane.VIEW:
        opened = playlists.opened
        title = opened.title if opened else "Playlist"
        rows, page = _paged_rows(
            playlists.tracks,
            playlists.track_selected,
            page_size,
            lambda i, track, sel: track_row(track, sel, i + 1),
        )
        message, level = None, "info"
        if playlists.view_loading:
            message = "Loading playlist..."
        elif playlists.view_error:
            message, level = playlists.view_error, "error"
        elif not playlists.tracks:
            message = "Playlist is empty"
        return BodyView(title, rows, None, message, level, page)

    focused = playlists.focus == Focus.INPUT
    input_view = InputView("Search playlists: ", playlists.query, focused)
    select = playlists.selected if not focused else -1

    def make_row(i, ref, _):
        detail = f"{ref.track_count} tracks" if ref.track_count is not None else ""
        text = ref.title + (f" ({ref.author})" if ref.author else "")
        return Row(text, detail, i == select)

    rows, page = _paged_rows(playlists.results, max(playlists.selected, 0), page_size, make_row)
    message, level = None, "info"
    if playlists.loading:
        message = "Searching..."
    elif playlists.error:
        message, level = playlists.error, "error"
    elif not playlists.results and playlists.generation > 0:
        message = "No playlists found"
    return BodyView("Playlist search", rows, input_view, message, level, page)


def _user_playlist_body(state: UIState, page_size: int) -> BodyView:
    user = state.user_playlists

    if user.pane == Pane.VIEW and user.opened is not None:
        rows, page = _paged_rows(
            user.tracks,
            user.track_selected,
            page_size,
            lambda i, track, sel: track_row(track, sel, track.position or i + 1),
        )
        message = None if user.tracks else "No tracks yet. Press a on any track to add it."
        return BodyView(user.opened, rows, None, message, "info", page)

    rows, page = _paged_rows(
        user.names,
        user.selected,
        page_size,
        lambda i, name, sel: Row(name, "", sel),
    )
    message = None if user.names else "No playlists yet. Press ` to create one."
    return BodyView("My Playlists", rows, None, message, "info", page)


def _history_body(state: UIState, page_size: int) -> BodyView:
    history = state.history

    def make_row(i, entry, sel):
        row = track_row(entry.track, sel)
        played = entry.played_at.strftime("%Y-%m-%d %H:%M")
        return Row(row.text, f"{row.detail}  {played}", sel)

    rows, page = _paged_rows(history.entries, history.selected, page_size, make_row)
    message = None if history.entries else "No history yet"
    return BodyView("History", rows, None, message, "info", page)


def build_body(state: UIState, page_size: int) -> BodyView:
    match body_mode(state):
        case Mode.SEARCH:
            return _search_body(state, page_size)
        case Mode.PLAYLIST:
            return _playlist_body(state, page_size)
        case Mode.USER_PLAYLIST:
            return _user_playlist_body(state, page_size)
        case Mode.HISTORY:
            return _history_body(state, page_size)
    return _home_body(state)


# -----------------------------------------------------------------------------
# Player bar, hints, popups
# -----------------------------------------------------------------------------


def build_player_bar(state: UIState, config: Config) -> PlayerBarView:
    playback = state.playback
    ui = config.ui
    shown = playback.pending if playback.status == PlaybackStatus.LOADING else playback.current

    playing = playback.status == PlaybackStatus.PLAYING and not playback.paused
    icon = ui.play_icon if playing else ui.pause_icon

    status = {
        PlaybackStatus.IDLE: "Stopped",
        PlaybackStatus.LOADING: "Loading...",
        PlaybackStatus.PLAYING: "Paused" if playback.paused else "Playing",
        PlaybackStatus.ENDED: "Ended",
        PlaybackStatus.ERROR: "Error",
    }[playback.status]

    progress = 0.0
    if playback.duration > 0:
        progress = min(max(playback.position / playback.duration, 0.0), 1.0)

    queue = playback.queue
    queue_info = ""
    if queue.engaged:
        queue_info = f"{queue.index + 1}/{len(queue.tracks)}"
        if queue.source:
            queue_info += f" {queue.source}"

    return PlayerBarView(
        icon=icon,
        title=shown.title if shown else "Nothing playing",
        artists=shown.artist_line if shown else "",
        elapsed=format_duration(playback.position if shown else None),
        total=format_duration(playback.duration or (shown.duration if shown else None)),
        progress=progress,
        volume=playback.volume,
        status=status,
        queue=queue_info,
    )


def build_hints(state: UIState) -> str:
    if state.pending_leader:
        return "s search  u playlists  h history  p player  ; home  q quit"

    mode = state.mode
    if mode == Mode.SEARCH:
        if state.search.focus == Focus.INPUT:
            return "Enter search  Tab results  ; playlists  : menu"
        return "Enter play  a add  ; playlists  Tab input  : menu  ? help"
    if mode == Mode.PLAYLIST:
        playlists = state.playlists
        if playlists.pane == Pane.VIEW:
            return "Enter play from here  p play all  a add  Esc back  ←→ page"
        if playlists.focus == Focus.INPUT:
            return "Enter search  Tab results  ; songs  : menu"
        return "Enter open  [ view  ; songs  Tab input  : menu  ? help"
    if mode == Mode.USER_PLAYLIST:
        if state.user_playlists.pane == Pane.VIEW:
            return "Enter play from here  p play all  d remove  a add  Esc back"
        return "Enter open  ` new  d delete  [ view  : menu  ? help"
    if mode == Mode.HISTORY:
        return "Enter play  a add  d delete  ←→ page  : menu  ? help"
    if mode == Mode.PLAYER:
        return "Space pause  n/p next/prev  +/- volume  l/h seek  : menu"
    return ": menu  ? help"


def build_popup(state: UIState) -> Optional[PopupView]:
    popup = state.popup
    match popup:
        case NamePopup():
            return PopupView(
                title="New playlist",
                input=InputView("Name: ", popup.text, True),
                error=popup.error,
                hint="Enter create  Esc cancel",
            )
        case AddToPlaylistPopup():
            rows = tuple(
                Row(name, "", i == popup.selected) for i, name in enumerate(popup.names)
            )
            return PopupView(
                title=f"Add {popup.track.title} to",
                rows=rows,
                error=popup.error,
                hint="Enter add  Esc cancel",
            )
        case ConfirmDeletePopup():
            rows = (Row("Yes", "", popup.confirm), Row("No", "", not popup.confirm))
            return PopupView(
                title=f"Delete playlist {popup.name}?",
                rows=rows,
                hint="y/n  Tab switch  Enter confirm",
            )
    return None


def build_snapshot(state: UIState, config: Config, now: Optional[float] = None) -> RenderSnapshot:
    """Everything the renderer draws for one frame."""
    active = body_mode(state) if state.mode != Mode.PLAYER else Mode.PLAYER
    tabs = tuple((label, mode == active) for mode, label in TAB_LABELS)

    feedback = None
    if should_show_feedback(state, now, config.ui.feedback_seconds):
        feedback = (state.feedback_message, state.feedback_level)

    return RenderSnapshot(
        tabs=tabs,
        body=build_body(state, config.library.page_size),
        player=build_player_bar(state, config),
        hints=build_hints(state),
        feedback=feedback,
        popup=build_popup(state),
        help=HELP_ROWS if state.show_help else None,
        pending_leader=state.pending_leader,
    )
