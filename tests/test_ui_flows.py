"""End-to-end flows through key routing, command execution and messages."""

from blessed.keyboard import Keystroke

from conftest import (
    DOWN,
    ENTER,
    ESCAPE,
    UP,
    FakeProvider,
    Harness,
    make_track,
)
from feather_player.core import database
from feather_player.core.exceptions import PersistenceError
from feather_player.domain.library.models import PlaylistRef
from feather_player.domain.playback.exceptions import PlayerProcessError
from feather_player.domain.provider.exceptions import NetworkError, RestrictedError
from feather_player.messages import PlaybackTick, PlayerCrashed, TrackLoaded
from feather_player.ui.blessed.events.commands import execute_command, switch_mode
from feather_player.ui.blessed.events.keyboard import route_key
from feather_player.ui.blessed.state import (
    AddToPlaylistPopup,
    ConfirmDeletePopup,
    Focus,
    Mode,
    NamePopup,
    Pane,
    PlaybackStatus,
    UIState,
)


def type_text(harness, state, text):
    return harness.press(state, *text)


def end_of_track(harness, state):
    """Report the current track as finished and let auto-play react."""
    playback = state.playback
    harness.inbox.append(
        PlaybackTick(playback.generation, playback.duration, playback.duration, False, 50, ended=True)
    )
    return harness.settle(state)


def open_user_playlist(harness, name, tracks):
    database.create_playlist(name)
    for track in tracks:
        database.add_track_to_playlist(name, track)
    state = harness.press(UIState(), ":", "u")
    return harness.press(state, ENTER)


class TestSearchAndPlay:
    def test_search_select_and_pause(self, temp_db):
        harness = Harness(FakeProvider(tracks=[make_track(n) for n in range(3)]))

        state = harness.press(UIState(), ":", "s")
        assert state.mode == Mode.SEARCH

        state = type_text(harness, state, "foo")
        state = harness.press(state, ENTER)
        assert state.search.loading
        state = harness.settle(state)

        assert harness.provider.searches == ["foo"]
        assert len(state.search.results) == 3
        assert state.search.focus == Focus.RESULTS

        state = harness.press(state, DOWN, ENTER)
        state = harness.settle(state)

        assert len(harness.player.loads) == 1
        assert harness.player.loads[0][1].endswith("vid1")
        assert state.playback.status == PlaybackStatus.PLAYING
        assert state.playback.current.id == "vid1"

        state = harness.press(state, ":", "p")
        assert state.mode == Mode.PLAYER
        assert state.previous_mode == Mode.SEARCH

        state = harness.press(state, " ")
        assert state.playback.paused is True
        state = harness.press(state, " ")
        assert state.playback.paused is False
        assert [c for c in harness.player.calls if c[0] == "toggle"] == [("toggle",), ("toggle",)]

    def test_leader_leaves_search_while_typing(self, temp_db):
        harness = Harness()
        state = harness.press(UIState(), ":", "s", "a", "b")
        assert state.search.focus == Focus.INPUT

        state = harness.press(state, ":", "h")
        assert state.mode == Mode.HISTORY

        state = harness.press(state, ":", "s")
        assert state.mode == Mode.SEARCH
        assert state.search.query == "ab"

    def test_kind_switch_while_typing(self, temp_db):
        harness = Harness()
        state = harness.press(UIState(), ":", "s", "a", ";")
        assert state.mode == Mode.PLAYLIST
        assert state.search.query == "a"

    def test_played_track_lands_in_history(self, temp_db):
        harness = Harness(FakeProvider(tracks=[make_track(1)]))
        state = harness.press(UIState(), ":", "s", "x", ENTER)
        state = harness.settle(state)
        state = harness.settle(harness.press(state, ENTER))

        state = harness.press(state, ":", "h")
        assert [e.track.id for e in state.history.entries] == ["vid1"]

    def test_empty_query_is_not_submitted(self, temp_db):
        harness = Harness()
        state = harness.press(UIState(), ":", "s", ENTER)
        assert harness.jobs.pending == []
        assert state.feedback_level == "warning"

    def test_failed_search_offers_retry(self, temp_db):
        def offline(query):
            raise NetworkError("offline")

        harness = Harness()
        harness.provider.search = offline

        state = harness.press(UIState(), ":", "s", "q", ENTER)
        state = harness.settle(state)

        assert state.search.focus == Focus.INPUT
        assert "retry" in state.search.error
        assert not state.search.loading

    def test_stale_search_results_discarded(self, temp_db):
        harness = Harness()
        harness.provider.search = lambda query: [make_track(1 if query == "first" else 2)]

        state = harness.press(UIState(), ":", "s")
        state = harness.press(type_text(harness, state, "first"), ENTER)
        state = harness.press(state, *["\x7f"] * 5)
        state = harness.press(type_text(harness, state, "second"), ENTER)
        assert len(harness.jobs.pending) == 2

        # Newer search finishes first, then the older one arrives late
        harness.jobs.run(1)
        state = harness.drain(state)
        harness.jobs.run(0)
        state = harness.drain(state)

        assert [t.id for t in state.search.results] == ["vid2"]
        assert state.search.generation == 2


class TestPlaybackGenerations:
    def test_superseded_play_request_never_loads(self, temp_db):
        harness = Harness(FakeProvider(tracks=[make_track(1), make_track(2)]))
        state = harness.settle(harness.press(UIState(), ":", "s", "x", ENTER))

        state = harness.press(state, ENTER)  # vid1
        state = harness.press(state, DOWN, ENTER)  # vid2
        assert state.playback.generation == 2
        assert state.playback.pending.id == "vid2"

        harness.jobs.run(1)
        state = harness.drain(state)
        harness.jobs.run(0)
        state = harness.drain(state)

        assert len(harness.player.loads) == 1
        assert harness.player.loads[0][2] == 2
        assert state.playback.current.id == "vid2"

    def test_failed_request_stops_previous_track(self, temp_db):
        provider = FakeProvider(
            tracks=[make_track(0), make_track(1)],
            failures={"vid1": RestrictedError("age restricted")},
        )
        harness = Harness(provider)
        state = harness.settle(harness.press(UIState(), ":", "s", "x", ENTER))
        state = harness.settle(harness.press(state, ENTER))
        assert state.playback.current.id == "vid0"

        state = harness.settle(harness.press(state, DOWN, ENTER))

        assert ("stop_playback",) in harness.player.calls
        assert state.playback.status == PlaybackStatus.ERROR
        assert state.playback.current is None
        assert "Restricted" in state.feedback_message

        # The previous track can be started again and controlled normally
        state = harness.settle(harness.press(state, UP, ENTER))
        assert state.playback.current.id == "vid0"
        state = harness.press(state, ":", "p", " ")
        assert state.playback.paused is True
        assert [c for c in harness.player.calls if c[0] == "toggle"] == [("toggle",)]

    def test_stale_load_and_tick_ignored(self, temp_db):
        harness = Harness(FakeProvider(tracks=[make_track(1)]))
        state = harness.settle(harness.press(UIState(), ":", "s", "x", ENTER))
        state = harness.settle(harness.press(state, ENTER))
        assert state.playback.generation == 1

        harness.inbox.append(TrackLoaded(0, 99.0))
        harness.inbox.append(PlaybackTick(0, 50.0, 99.0, True, 50, ended=True))
        after = harness.drain(state)

        assert after.playback == state.playback

    def test_single_track_play_stops_at_end(self, temp_db):
        harness = Harness(FakeProvider(tracks=[make_track(1), make_track(2)]))
        state = harness.settle(harness.press(UIState(), ":", "s", "x", ENTER))
        state = harness.settle(harness.press(state, ENTER))

        state = end_of_track(harness, state)

        assert len(harness.player.loads) == 1
        assert state.playback.status == PlaybackStatus.ENDED


class TestAutoPlay:
    def test_plays_through_and_stops_after_last(self, temp_db):
        harness = Harness()
        tracks = [make_track(n) for n in range(3)]
        state = open_user_playlist(harness, "Mix", tracks)
        assert state.user_playlists.pane == Pane.VIEW

        state = harness.settle(harness.press(state, "p"))
        for _ in tracks:
            state = end_of_track(harness, state)

        loaded = [call[1].rsplit("/", 1)[-1] for call in harness.player.loads]
        assert loaded == ["vid0", "vid1", "vid2"]
        assert state.playback.status == PlaybackStatus.ENDED
        assert not state.playback.queue.engaged

    def test_loops_when_configured(self, temp_db):
        harness = Harness()
        harness.ctx.config.playback.at_end = "loop"
        state = open_user_playlist(harness, "Mix", [make_track(0), make_track(1)])

        state = harness.settle(harness.press(state, "p"))
        for _ in range(2):
            state = end_of_track(harness, state)

        assert len(harness.player.loads) == 3
        assert state.playback.current.id == "vid0"

    def test_restricted_track_skipped(self, temp_db):
        provider = FakeProvider(failures={"vid1": RestrictedError("age restricted")})
        harness = Harness(provider)
        state = open_user_playlist(harness, "Mix", [make_track(n) for n in range(3)])

        state = harness.settle(harness.press(state, "p"))
        state = end_of_track(harness, state)

        loaded = [call[1].rsplit("/", 1)[-1] for call in harness.player.loads]
        assert loaded == ["vid0", "vid2"]
        assert provider.resolved == ["vid0", "vid1", "vid2"]
        assert "Skipped restricted" in state.feedback_message

    def test_skip_keys_move_through_queue(self, temp_db):
        harness = Harness()
        state = open_user_playlist(harness, "Mix", [make_track(n) for n in range(3)])
        state = harness.settle(harness.press(state, "p"))

        state = harness.settle(harness.press(state, ":", "p", "n", "n", "n"))
        assert state.playback.current.id == "vid2"
        state = harness.settle(harness.press(state, "p"))
        assert state.playback.current.id == "vid1"

    def test_remote_playlist_plays_from_selection(self, temp_db):
        ref = PlaylistRef("PL1", "Hits", "https://www.youtube.com/playlist?list=PL1")
        provider = FakeProvider(playlists=[ref], playlist_tracks=[make_track(n) for n in range(3)])
        harness = Harness(provider)

        state = harness.press(UIState(), ":", "s")
        state = harness.press(state, ESCAPE, ";")
        assert state.mode == Mode.PLAYLIST

        state = harness.settle(harness.press(state, "h", "i", "t", "s", ENTER))
        state = harness.settle(harness.press(state, ENTER))
        assert state.playlists.pane == Pane.VIEW
        assert len(state.playlists.tracks) == 3

        state = harness.settle(harness.press(state, DOWN, ENTER))
        assert state.playback.current.id == "vid1"
        assert state.playback.queue.source == "Hits"
        assert state.playback.queue.remaining == 1


class TestUserPlaylists:
    def test_create_duplicate_and_delete(self, temp_db):
        harness = Harness()
        state = harness.press(UIState(), ":", "u", "`")
        assert isinstance(state.popup, NamePopup)

        # ':' and 'q' are typed into the name, not treated as commands
        state = harness.press(state, *"Mix:q", ENTER)
        assert state.popup is None
        assert state.user_playlists.names == ("Mix:q",)
        assert state.feedback_message == "Created playlist Mix:q"

        state = harness.press(state, "`", *"Mix:q", ENTER)
        assert isinstance(state.popup, NamePopup)
        assert "already exists" in state.popup.error
        state = harness.press(state, ESCAPE)
        assert state.popup is None

        state = harness.press(state, "d")
        assert isinstance(state.popup, ConfirmDeletePopup)
        state = harness.press(state, ENTER)  # default choice is "no"
        assert state.user_playlists.names == ("Mix:q",)

        state = harness.press(state, "d", "y")
        assert state.popup is None
        assert state.user_playlists.names == ()
        assert database.list_playlists() == []

    def test_empty_name_keeps_popup_open(self, temp_db):
        harness = Harness()
        state = harness.press(UIState(), ":", "u", "`", " ", ENTER)
        assert isinstance(state.popup, NamePopup)
        assert state.popup.error

    def test_add_search_result_to_playlist(self, temp_db):
        database.create_playlist("Mix")
        harness = Harness(FakeProvider(tracks=[make_track(1), make_track(2)]))
        state = harness.settle(harness.press(UIState(), ":", "s", "x", ENTER))

        state = harness.press(state, DOWN, "a")
        assert isinstance(state.popup, AddToPlaylistPopup)
        assert state.popup.track.id == "vid2"

        state = harness.press(state, ENTER)
        assert state.popup is None
        assert [t.id for t in database.get_playlist("Mix")] == ["vid2"]
        assert state.feedback_message == "Added Song 2 to Mix"

    def test_add_without_playlists_warns(self, temp_db):
        harness = Harness(FakeProvider(tracks=[make_track(1)]))
        state = harness.settle(harness.press(UIState(), ":", "s", "x", ENTER))
        state = harness.press(state, "a")
        assert state.popup is None
        assert state.feedback_level == "warning"

    def test_remove_track_from_opened_playlist(self, temp_db):
        harness = Harness()
        state = open_user_playlist(harness, "Mix", [make_track(1), make_track(2)])
        state = harness.press(state, "d")

        assert [t.id for t in state.user_playlists.tracks] == ["vid2"]
        assert [t.id for t in database.get_playlist("Mix")] == ["vid2"]


class TestHistoryAndHome:
    def test_delete_history_entry(self, temp_db):
        database.append_history(make_track(1))
        harness = Harness()
        state = harness.press(UIState(), ":", "h")
        state = harness.press(state, "d")
        assert state.history.entries == ()
        assert state.feedback_message == "Removed from history: Song 1"

    def test_playing_from_history_refreshes_list(self, temp_db):
        for n in (1, 2, 3):
            database.append_history(make_track(n))
        harness = Harness()
        state = harness.press(UIState(), ":", "h")
        assert [e.track.id for e in state.history.entries] == ["vid3", "vid2", "vid1"]

        state = harness.settle(harness.press(state, DOWN, DOWN, ENTER))

        assert [e.track.id for e in state.history.entries] == ["vid1", "vid3", "vid2"]
        assert state.history.selected == 0

    def test_home_shows_stats(self, temp_db):
        database.append_history(make_track(1))
        database.create_playlist("Mix")
        state = switch_mode(UIState(mode=Mode.SEARCH), Mode.HOME)
        assert state.home.last_played.track.id == "vid1"
        assert state.home.stats.songs_played == 1
        assert state.home.playlist_count == 1

    def test_quit_from_leader(self, temp_db):
        harness = Harness()
        state = harness.press(UIState(), ":")
        state, commands = route_key(state, Keystroke("q"), harness.ctx.config.keys)

        _, _, quit_requested = execute_command(harness.ctx, state, commands[0])
        assert quit_requested is True


def storage_failure(*args, **kwargs):
    raise PersistenceError("database is locked")


class TestErrorRecovery:
    def test_create_playlist_storage_failure_keeps_popup(self, temp_db, monkeypatch):
        harness = Harness()
        state = harness.press(UIState(), ":", "u", "`", *"Mix")
        monkeypatch.setattr(database, "create_playlist", storage_failure)

        state = harness.press(state, ENTER)

        assert isinstance(state.popup, NamePopup)
        assert state.popup.text == "Mix"
        assert "Could not save" in state.popup.error
        assert state.user_playlists.names == ()

    def test_add_to_playlist_storage_failure_keeps_popup(self, temp_db, monkeypatch):
        database.create_playlist("Mix")
        harness = Harness(FakeProvider(tracks=[make_track(1)]))
        state = harness.settle(harness.press(UIState(), ":", "s", "x", ENTER))
        state = harness.press(state, "a")
        monkeypatch.setattr(database, "add_track_to_playlist", storage_failure)

        state = harness.press(state, ENTER)

        assert isinstance(state.popup, AddToPlaylistPopup)
        assert "Could not save" in state.popup.error
        assert database.get_playlist("Mix") == []

    def test_history_write_failure_keeps_playing(self, temp_db, monkeypatch):
        harness = Harness(FakeProvider(tracks=[make_track(1)]))
        state = harness.settle(harness.press(UIState(), ":", "s", "x", ENTER))
        monkeypatch.setattr(database, "append_history", storage_failure)

        state = harness.settle(harness.press(state, ENTER))

        assert state.playback.status == PlaybackStatus.PLAYING
        assert state.playback.current.id == "vid1"
        assert state.feedback_level == "error"
        assert "History not saved" in state.feedback_message

    def test_player_crash_then_replay(self, temp_db):
        harness = Harness(FakeProvider(tracks=[make_track(1)]))
        state = harness.settle(harness.press(UIState(), ":", "s", "x", ENTER))
        state = harness.settle(harness.press(state, ENTER))

        harness.inbox.append(PlayerCrashed(PlayerProcessError("mpv exited unexpectedly")))
        state = harness.drain(state)
        assert state.playback.status == PlaybackStatus.ERROR
        assert state.playback.current is None
        assert "retry" in state.feedback_message

        state = harness.press(state, ":", "p", " ")
        assert state.mode == Mode.PLAYER
        assert not [c for c in harness.player.calls if c[0] == "toggle"]

        state = harness.settle(harness.press(state, ":", "s", ENTER))
        assert len(harness.player.loads) == 2
        assert state.playback.status == PlaybackStatus.PLAYING
        assert state.playback.current.id == "vid1"
