"""Tests for the pure render selectors."""

from datetime import datetime

from conftest import make_track
from feather_player.core.config import Config
from feather_player.domain.library.models import HistoryEntry, ListeningStats
from feather_player.domain.playback.queue import bind_queue
from feather_player.ui.blessed.state import (
    ConfirmDeletePopup,
    Focus,
    HistoryState,
    HomeState,
    Mode,
    NamePopup,
    Pane,
    PlaybackStatus,
    PlaybackView,
    SearchState,
    UIState,
    UserPlaylistState,
    set_feedback,
)
from feather_player.ui.blessed.state_selectors import (
    HELP_ROWS,
    build_body,
    build_hints,
    build_player_bar,
    build_popup,
    build_snapshot,
)

CONFIG = Config()


class TestBodies:
    def test_home_with_stats(self):
        home = HomeState(
            last_played=HistoryEntry(make_track(1), datetime(2024, 1, 1)),
            stats=ListeningStats(songs_played=12, seconds_played=3725),
            playlist_count=2,
        )
        texts = [row.text for row in build_body(UIState(home=home), 20).rows]
        assert "Last played: Song 1 - Artist 1" in texts
        assert "Songs played: 12" in texts
        assert "Time listened: 1h 02m" in texts
        assert "Playlists: 2" in texts

    def test_search_loading_and_empty(self):
        state = UIState(mode=Mode.SEARCH, search=SearchState(query="x", loading=True, generation=1))
        assert build_body(state, 20).message == "Searching..."

        state = UIState(mode=Mode.SEARCH, search=SearchState(query="x", generation=1))
        assert build_body(state, 20).message == "No results"

        assert build_body(UIState(mode=Mode.SEARCH), 20).message is None

    def test_search_error_is_error_level(self):
        state = UIState(mode=Mode.SEARCH, search=SearchState(error="offline", generation=1))
        body = build_body(state, 20)
        assert (body.message, body.message_level) == ("offline", "error")

    def test_search_selection_hidden_while_typing(self):
        tracks = tuple(make_track(n) for n in range(3))
        typing = UIState(mode=Mode.SEARCH, search=SearchState(results=tracks))
        browsing = UIState(
            mode=Mode.SEARCH, search=SearchState(results=tracks, focus=Focus.RESULTS, selected=1)
        )
        assert not any(row.selected for row in build_body(typing, 20).rows)
        assert [row.selected for row in build_body(browsing, 20).rows] == [False, True, False]
        assert build_body(browsing, 20).input.focused is False

    def test_paged_history(self):
        entries = tuple(HistoryEntry(make_track(n), datetime(2024, 1, 1)) for n in range(45))
        state = UIState(mode=Mode.HISTORY, history=HistoryState(entries=entries, selected=25))
        body = build_body(state, 20)
        assert len(body.rows) == 20
        assert body.rows[0].text.startswith("Song 20")
        assert body.rows[5].selected
        assert body.page == "Page 2/3"

    def test_opened_user_playlist(self):
        user = UserPlaylistState(
            pane=Pane.VIEW, names=("Mix",), opened="Mix", tracks=(make_track(1)._replace(position=1),)
        )
        body = build_body(UIState(mode=Mode.USER_PLAYLIST, user_playlists=user), 20)
        assert body.title == "Mix"
        assert body.rows[0].text == "  1. Song 1 - Artist 1"
        assert body.rows[0].detail == "3:00"

    def test_player_mode_keeps_previous_body(self):
        state = UIState(mode=Mode.PLAYER, previous_mode=Mode.HISTORY)
        assert build_body(state, 20).title == "History"


class TestPlayerBar:
    def test_idle(self):
        bar = build_player_bar(UIState(), CONFIG)
        assert bar.title == "Nothing playing"
        assert bar.status == "Stopped"
        assert bar.elapsed == "--:--"

    def test_loading_shows_pending_track(self):
        playback = PlaybackView(status=PlaybackStatus.LOADING, pending=make_track(2))
        bar = build_player_bar(UIState(playback=playback), CONFIG)
        assert bar.title == "Song 2"
        assert bar.status == "Loading..."

    def test_playing_progress_and_queue(self):
        tracks = tuple(make_track(n) for n in range(4))
        playback = PlaybackView(
            status=PlaybackStatus.PLAYING,
            current=tracks[1],
            position=45.0,
            duration=180.0,
            volume=70,
            queue=bind_queue(tracks, 1, source="Mix"),
        )
        bar = build_player_bar(UIState(playback=playback), CONFIG)
        assert bar.icon == CONFIG.ui.play_icon
        assert bar.progress == 0.25
        assert (bar.elapsed, bar.total) == ("0:45", "3:00")
        assert bar.queue == "2/4 Mix"
        assert bar.volume == 70

    def test_paused(self):
        playback = PlaybackView(status=PlaybackStatus.PLAYING, current=make_track(1), paused=True)
        bar = build_player_bar(UIState(playback=playback), CONFIG)
        assert bar.icon == CONFIG.ui.pause_icon
        assert bar.status == "Paused"


class TestChrome:
    def test_leader_hint(self):
        assert build_hints(UIState(pending_leader=True)).startswith("s search")

    def test_popups(self):
        assert build_popup(UIState()) is None
        name = build_popup(UIState(popup=NamePopup(text="Mi", error="bad")))
        assert name.input.text == "Mi"
        assert name.error == "bad"
        delete = build_popup(UIState(popup=ConfirmDeletePopup(name="Mix")))
        assert delete.title == "Delete playlist Mix?"
        assert [row.selected for row in delete.rows] == [False, True]

    def test_snapshot_tabs_and_feedback(self):
        state = set_feedback(UIState(mode=Mode.HISTORY), "Saved", "success")
        snapshot = build_snapshot(state, CONFIG, now=state.feedback_time + 1)
        assert ("History", True) in snapshot.tabs
        assert snapshot.feedback == ("Saved", "success")
        assert snapshot.help is None

        later = build_snapshot(state, CONFIG, now=state.feedback_time + 60)
        assert later.feedback is None

    def test_snapshot_help_and_player_tab(self):
        state = UIState(mode=Mode.PLAYER, previous_mode=Mode.SEARCH, show_help=True)
        snapshot = build_snapshot(state, CONFIG)
        assert snapshot.help == HELP_ROWS
        assert [label for label, active in snapshot.tabs if active] == ["Player"]

    def test_snapshot_is_comparable(self):
        state = UIState()
        assert build_snapshot(state, CONFIG, now=0) == build_snapshot(state, CONFIG, now=0)
