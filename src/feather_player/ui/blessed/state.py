"""UI state management - immutable state updates.

The whole interactive session is one UIState value. Key routing, command
execution and message handling all take a state and return a new one.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from time import time
from typing import Any, Optional, Union

from feather_player.domain.library.models import (
    HistoryEntry,
    ListeningStats,
    PlaylistRef,
    Track,
)
from feather_player.domain.playback.queue import PlaybackQueue

# How long feedback messages stay in the status bar
FEEDBACK_SECONDS = 4.0


class Mode(Enum):
    HOME = "home"
    SEARCH = "search"
    PLAYLIST = "playlist"
    USER_PLAYLIST = "userplaylist"
    HISTORY = "history"
    PLAYER = "player"


class Focus(Enum):
    INPUT = "input"
    RESULTS = "results"


class Pane(Enum):
    LIST = "list"
    VIEW = "view"


class PlaybackStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    ENDED = "ended"
    ERROR = "error"


class Action(Enum):
    """Discrete commands produced by the input router."""

    NAVIGATE_UP = "navigate_up"
    NAVIGATE_DOWN = "navigate_down"
    NEXT_PAGE = "next_page"
    PREVIOUS_PAGE = "previous_page"
    SELECT = "select"
    TOGGLE_FOCUS = "toggle_focus"
    TOGGLE_PANE = "toggle_pane"
    TOGGLE_SEARCH_KIND = "toggle_search_kind"
    TOGGLE_CHOICE = "toggle_choice"
    ADD_TO_PLAYLIST = "add_to_playlist"
    PLAY_ALL = "play_all"
    SKIP_NEXT = "skip_next"
    SKIP_PREVIOUS = "skip_previous"
    VOLUME_UP = "volume_up"
    VOLUME_DOWN = "volume_down"
    SEEK_FORWARD = "seek_forward"
    SEEK_BACKWARD = "seek_backward"
    TOGGLE_PAUSE = "toggle_pause"
    INSERT_CHAR = "insert_char"
    DELETE_CHAR = "delete_char"
    CANCEL = "cancel"
    CREATE_PLAYLIST = "create_playlist"
    DELETE = "delete"
    TOGGLE_HELP = "toggle_help"
    SWITCH_MODE = "switch_mode"
    QUIT = "quit"


@dataclass(frozen=True)
class Command:
    """Type-safe command from the input router to the state machine."""

    action: Action
    value: Any = None


@dataclass
class SearchState:
    """Song search: query input and results list."""

    query: str = ""
    focus: Focus = Focus.INPUT
    results: tuple[Track, ...] = ()
    selected: int = 0
    generation: int = 0
    loading: bool = False
    error: Optional[str] = None


@dataclass
class PlaylistSearchState:
    """Remote playlist search plus the opened playlist's track view."""

    query: str = ""
    focus: Focus = Focus.INPUT
    pane: Pane = Pane.LIST
    results: tuple[PlaylistRef, ...] = ()
    selected: int = 0
    generation: int = 0
    loading: bool = False
    error: Optional[str] = None

    opened: Optional[PlaylistRef] = None
    tracks: tuple[Track, ...] = ()
    track_selected: int = 0
    view_generation: int = 0
    view_loading: bool = False
    view_error: Optional[str] = None


@dataclass
class UserPlaylistState:
    """Local playlists and the opened playlist's tracks."""

    pane: Pane = Pane.LIST
    names: tuple[str, ...] = ()
    selected: int = 0
    opened: Optional[str] = None
    tracks: tuple[Track, ...] = ()
    track_selected: int = 0


@dataclass
class HistoryState:
    entries: tuple[HistoryEntry, ...] = ()
    selected: int = 0


@dataclass
class HomeState:
    last_played: Optional[HistoryEntry] = None
    stats: ListeningStats = field(default_factory=ListeningStats)
    playlist_count: int = 0


@dataclass
class NamePopup:
    """Text input for a new playlist name; captures every key."""

    text: str = ""
    error: Optional[str] = None


@dataclass
class AddToPlaylistPopup:
    track: Track
    names: tuple[str, ...] = ()
    selected: int = 0
    error: Optional[str] = None


@dataclass
class ConfirmDeletePopup:
    name: str
    confirm: bool = False  # Highlighted choice; Tab toggles


Popup = Union[NamePopup, AddToPlaylistPopup, ConfirmDeletePopup]


@dataclass
class PlaybackView:
    """What the UI knows about playback.

    generation is bumped for every play request; results tagged with an
    older generation are discarded.
    """

    status: PlaybackStatus = PlaybackStatus.IDLE
    current: Optional[Track] = None
    pending: Optional[Track] = None
    position: float = 0.0
    duration: float = 0.0
    volume: int = 50
    paused: bool = False
    queue: PlaybackQueue = field(default_factory=PlaybackQueue)
    generation: int = 0
    error: Optional[str] = None
    unflushed_seconds: float = 0.0


@dataclass
class UIState:
    """Immutable UI state (update with dataclasses.replace)."""

    mode: Mode = Mode.HOME
    previous_mode: Mode = Mode.HOME  # Body shown while in Player mode
    search_kind: Mode = Mode.SEARCH  # Last used of Search / Playlist

    search: SearchState = field(default_factory=SearchState)
    playlists: PlaylistSearchState = field(default_factory=PlaylistSearchState)
    user_playlists: UserPlaylistState = field(default_factory=UserPlaylistState)
    history: HistoryState = field(default_factory=HistoryState)
    home: HomeState = field(default_factory=HomeState)
    playback: PlaybackView = field(default_factory=PlaybackView)

    popup: Optional[Popup] = None
    show_help: bool = False
    pending_leader: bool = False

    feedback_message: Optional[str] = None
    feedback_level: str = "info"  # info, success, warning, error
    feedback_time: Optional[float] = None


def set_feedback(state: UIState, message: str, level: str = "info") -> UIState:
    """Show a message in the status bar for FEEDBACK_SECONDS."""
    return replace(
        state, feedback_message=message, feedback_level=level, feedback_time=time()
    )


def clear_feedback(state: UIState) -> UIState:
    return replace(state, feedback_message=None, feedback_time=None)


def should_show_feedback(
    state: UIState, now: Optional[float] = None, duration: float = FEEDBACK_SECONDS
) -> bool:
    """Check if feedback should still be displayed."""
    if state.feedback_message is None or state.feedback_time is None:
        return False
    now = time() if now is None else now
    return now - state.feedback_time < duration


def text_input_focused(state: UIState) -> bool:
    """True when a text field receives characters verbatim."""
    if isinstance(state.popup, NamePopup):
        return True
    if state.mode == Mode.SEARCH:
        return state.search.focus == Focus.INPUT
    if state.mode == Mode.PLAYLIST:
        return state.playlists.pane == Pane.LIST and state.playlists.focus == Focus.INPUT
    return False


def body_mode(state: UIState) -> Mode:
    """Mode whose body is displayed; Player mode keeps the previous body."""
    return state.previous_mode if state.mode == Mode.PLAYER else state.mode


def edit_text(text: str, action: Action, char: str = "") -> str:
    if action == Action.INSERT_CHAR:
        return text + char
    if action == Action.DELETE_CHAR:
        return text[:-1]
    return text
