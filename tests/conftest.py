"""Shared fixtures: temporary database and fakes for the provider, player
and job runner."""

import pytest
from blessed.keyboard import Keystroke

import feather_player.core.database as db_module
from feather_player.context import AppContext
from feather_player.core.config import Config
from feather_player.domain.library.models import Track
from feather_player.messages import TrackLoaded
from feather_player.ui.blessed.events.commands import execute_command, handle_message
from feather_player.ui.blessed.events.keyboard import route_key


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point the database module at a fresh file under tmp_path."""
    db_path = tmp_path / "feather.db"
    monkeypatch.setattr(db_module, "get_database_path", lambda: db_path)
    db_module.init_database()
    return db_path


def make_track(n: int, duration: float = 180.0) -> Track:
    return Track(id=f"vid{n}", title=f"Song {n}", artists=(f"Artist {n}",), duration=duration)


class FakeProvider:
    """In-memory provider. Errors listed in failures are raised per track id."""

    def __init__(self, tracks=(), playlists=(), playlist_tracks=(), failures=None):
        self.tracks = list(tracks)
        self.playlists = list(playlists)
        self.playlist_tracks = list(playlist_tracks)
        self.failures = failures or {}
        self.searches: list[str] = []
        self.resolved: list[str] = []

    def search(self, query):
        self.searches.append(query)
        return list(self.tracks)

    def search_playlists(self, query):
        self.searches.append(query)
        return list(self.playlists)

    def resolve_playable_source(self, track):
        self.resolved.append(track.id)
        if track.id in self.failures:
            raise self.failures[track.id]
        return f"https://stream.example/{track.id}"

    def expand_playlist_reference(self, locator):
        return list(self.playlist_tracks)


class FakePlayer:
    """Records controller calls; load() reports success like the real worker."""

    def __init__(self, inbox=None, duration: float = 180.0):
        self.inbox = inbox
        self.duration = duration
        self.calls: list[tuple] = []

    @property
    def loads(self) -> list[tuple]:
        return [call for call in self.calls if call[0] == "load"]

    def load(self, locator, generation):
        self.calls.append(("load", locator, generation))
        if self.inbox is not None:
            self.inbox.append(TrackLoaded(generation, self.duration))

    def toggle(self):
        self.calls.append(("toggle",))

    def stop_playback(self):
        self.calls.append(("stop_playback",))

    def seek(self, delta):
        self.calls.append(("seek", delta))

    def set_volume(self, delta):
        self.calls.append(("volume", delta))

    def stop(self):
        self.calls.append(("stop",))


class ManualJobRunner:
    """Job runner that holds jobs until the test runs them, in any order."""

    def __init__(self, inbox: list):
        self.inbox = inbox
        self.pending: list[tuple[str, object]] = []
        self.closed = False

    def post(self, message):
        self.inbox.append(message)

    def submit(self, name, job):
        self.pending.append((name, job))

    def run(self, index: int = 0):
        _, job = self.pending.pop(index)
        message = job()
        if message is not None:
            self.post(message)
        return message

    def run_all(self):
        while self.pending:
            self.run(0)

    def shutdown(self):
        self.closed = True


class Harness:
    """Drives the state machine the way the main loop does."""

    def __init__(self, provider=None, config=None):
        self.inbox: list = []
        self.jobs = ManualJobRunner(self.inbox)
        self.player = FakePlayer(self.inbox)
        self.provider = provider or FakeProvider()
        self.ctx = AppContext(
            config=config or Config(),
            provider=self.provider,
            player=self.player,
            jobs=self.jobs,
        )

    def execute(self, state, command):
        self.ctx, state, quit_requested = execute_command(self.ctx, state, command)
        return state

    def press(self, state, *keys):
        """Route keys through the keyboard router and execute the commands."""
        for key in keys:
            key = key if isinstance(key, Keystroke) else Keystroke(key)
            state, commands = route_key(state, key, self.ctx.config.keys)
            for command in commands:
                state = self.execute(state, command)
        return state

    def drain(self, state):
        """Apply queued messages, including ones produced while applying."""
        while self.inbox:
            state = handle_message(self.ctx, state, self.inbox.pop(0))
        return state

    def settle(self, state):
        """Run every pending job and apply all resulting messages."""
        while self.jobs.pending or self.inbox:
            self.jobs.run_all()
            state = self.drain(state)
        return state


ENTER = Keystroke("\n", code=343, name="KEY_ENTER")
ESCAPE = Keystroke("\x1b", code=361, name="KEY_ESCAPE")
TAB = Keystroke("\t", code=512, name="KEY_TAB")
BACKSPACE = Keystroke("\x7f", code=263, name="KEY_BACKSPACE")
UP = Keystroke("\x1b[A", code=259, name="KEY_UP")
DOWN = Keystroke("\x1b[B", code=258, name="KEY_DOWN")
LEFT = Keystroke("\x1b[D", code=260, name="KEY_LEFT")
RIGHT = Keystroke("\x1b[C", code=261, name="KEY_RIGHT")
CTRL_C = Keystroke("\x03")


@pytest.fixture
def harness(temp_db):
    return Harness()
