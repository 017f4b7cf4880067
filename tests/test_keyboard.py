"""Tests for key parsing and routing."""

import pytest
from blessed.keyboard import Keystroke

from conftest import BACKSPACE, CTRL_C, DOWN, ENTER, ESCAPE, TAB, make_track
from feather_player.core.config import KeysConfig
from feather_player.ui.blessed.events.keyboard import detect_mode, route_key
from feather_player.ui.blessed.events.keys import parse_key
from feather_player.ui.blessed.state import (
    Action,
    AddToPlaylistPopup,
    Command,
    ConfirmDeletePopup,
    Focus,
    Mode,
    NamePopup,
    Pane,
    PlaylistSearchState,
    SearchState,
    UIState,
)

KEYS = KeysConfig()


def route(state, key):
    key = key if isinstance(key, Keystroke) else Keystroke(key)
    return route_key(state, key, KEYS)


def actions(state, key):
    return [c.action for c in route(state, key)[1]]


class TestParseKey:
    def test_named_keys(self):
        assert parse_key(ENTER)["type"] == "enter"
        assert parse_key(DOWN)["type"] == "arrow_down"
        assert parse_key(BACKSPACE)["type"] == "backspace"

    def test_control_characters(self):
        assert parse_key(Keystroke("\r"))["type"] == "enter"
        assert parse_key(CTRL_C)["type"] == "ctrl_c"

    def test_printable(self):
        assert parse_key(Keystroke("x")) == {"type": "char", "name": None, "char": "x"}

    def test_timeout_is_unknown(self):
        assert parse_key(Keystroke(""))["type"] == "unknown"


class TestLeader:
    def test_leader_sets_pending(self):
        state, commands = route(UIState(), ":")
        assert state.pending_leader
        assert commands == []
        assert detect_mode(state) == "leader"

    @pytest.mark.parametrize(
        "key, mode",
        [
            ("s", Mode.SEARCH),
            ("u", Mode.USER_PLAYLIST),
            ("h", Mode.HISTORY),
            ("p", Mode.PLAYER),
            (";", Mode.HOME),
        ],
    )
    def test_leader_targets(self, key, mode):
        state, _ = route(UIState(), ":")
        state, commands = route(state, key)
        assert not state.pending_leader
        assert commands == [Command(Action.SWITCH_MODE, mode)]

    def test_leader_quit(self):
        state, _ = route(UIState(), ":")
        assert route(state, "q")[1] == [Command(Action.QUIT)]

    def test_unknown_second_key_cancels(self):
        state, _ = route(UIState(), ":")
        state, commands = route(state, "z")
        assert commands == []
        assert not state.pending_leader

    def test_custom_bindings(self):
        keys = KeysConfig(leader=",", search="f")
        state, _ = route_key(UIState(), Keystroke(","), keys)
        state, commands = route_key(state, Keystroke("f"), keys)
        assert commands == [Command(Action.SWITCH_MODE, Mode.SEARCH)]


class TestRouting:
    def test_unknown_key_produces_nothing(self):
        state = UIState()
        assert route(state, "z") == (state, [])
        assert route(state, Keystroke("")) == (state, [])

    def test_ctrl_c_always_quits(self):
        states = [
            UIState(),
            UIState(mode=Mode.SEARCH),
            UIState(popup=NamePopup()),
            UIState(pending_leader=True),
        ]
        for state in states:
            new_state, commands = route(state, CTRL_C)
            assert commands == [Command(Action.QUIT)]
            assert not new_state.pending_leader

    def test_search_input_types_plain_characters(self):
        state = UIState(mode=Mode.SEARCH)
        assert detect_mode(state) == "text_input"
        for char in ("q", "?", "s", "h"):
            assert route(state, char)[1] == [Command(Action.INSERT_CHAR, char)]

    def test_leader_works_while_typing_a_query(self):
        state, commands = route(UIState(mode=Mode.SEARCH), ":")
        assert state.pending_leader
        assert commands == []

        state, commands = route(state, "h")
        assert commands == [Command(Action.SWITCH_MODE, Mode.HISTORY)]
        assert not state.pending_leader

    def test_kind_switch_works_while_typing_a_query(self):
        assert actions(UIState(mode=Mode.SEARCH), ";") == [Action.TOGGLE_SEARCH_KIND]
        playlist_input = UIState(mode=Mode.PLAYLIST, playlists=PlaylistSearchState(focus=Focus.INPUT))
        assert actions(playlist_input, ";") == [Action.TOGGLE_SEARCH_KIND]

    def test_search_input_editing_keys(self):
        state = UIState(mode=Mode.SEARCH)
        assert actions(state, BACKSPACE) == [Action.DELETE_CHAR]
        assert actions(state, ENTER) == [Action.SELECT]
        assert actions(state, TAB) == [Action.TOGGLE_FOCUS]
        assert actions(state, ESCAPE) == [Action.TOGGLE_FOCUS]

    def test_search_results_keys(self):
        state = UIState(mode=Mode.SEARCH, search=SearchState(focus=Focus.RESULTS))
        assert actions(state, "j") == [Action.NAVIGATE_DOWN]
        assert actions(state, "a") == [Action.ADD_TO_PLAYLIST]
        assert actions(state, ";") == [Action.TOGGLE_SEARCH_KIND]
        assert route(state, ":")[0].pending_leader

    def test_playlist_view_keys(self):
        playlists = PlaylistSearchState(focus=Focus.RESULTS, pane=Pane.VIEW)
        state = UIState(mode=Mode.PLAYLIST, playlists=playlists)
        assert actions(state, "p") == [Action.PLAY_ALL]
        assert actions(state, "[") == [Action.TOGGLE_PANE]
        assert actions(state, Keystroke("\x1b[C", code=261, name="KEY_RIGHT")) == [Action.NEXT_PAGE]

    def test_player_keys(self):
        state = UIState(mode=Mode.PLAYER)
        assert actions(state, " ") == [Action.TOGGLE_PAUSE]
        assert actions(state, "+") == [Action.VOLUME_UP]
        assert actions(state, "-") == [Action.VOLUME_DOWN]
        assert actions(state, "n") == [Action.SKIP_NEXT]
        assert actions(state, DOWN) == [Action.VOLUME_DOWN]

    def test_help_toggle(self):
        assert actions(UIState(), "?") == [Action.TOGGLE_HELP]
        assert actions(UIState(show_help=True), ESCAPE) == [Action.TOGGLE_HELP]


class TestPopups:
    def test_name_popup_takes_every_character(self):
        state = UIState(mode=Mode.USER_PLAYLIST, popup=NamePopup())
        for char in (":", "q", "`", "d", "?"):
            assert route(state, char)[1] == [Command(Action.INSERT_CHAR, char)]
        assert actions(state, ESCAPE) == [Action.CANCEL]
        assert actions(state, CTRL_C) == [Action.QUIT]

    def test_add_popup_is_modal(self):
        state = UIState(mode=Mode.PLAYER, popup=AddToPlaylistPopup(track=make_track(1), names=("A",)))
        assert actions(state, " ") == []
        assert actions(state, ":") == []
        assert actions(state, "j") == [Action.NAVIGATE_DOWN]
        assert actions(state, ENTER) == [Action.SELECT]

    def test_confirm_delete_keys(self):
        state = UIState(mode=Mode.USER_PLAYLIST, popup=ConfirmDeletePopup(name="Mix"))
        assert route(state, "y")[1] == [Command(Action.SELECT, True)]
        assert actions(state, "n") == [Action.CANCEL]
        assert actions(state, TAB) == [Action.TOGGLE_CHOICE]
        assert actions(state, "x") == []
