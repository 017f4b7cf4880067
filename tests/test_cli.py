"""Tests for the command-line entry point."""

import pytest

from conftest import make_track
from feather_player import cli
from feather_player.core import config, database


@pytest.fixture
def library(tmp_path, monkeypatch):
    """Isolated config/data dirs with a migrated database."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv(config.COOKIES_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(database, "get_database_path", lambda: tmp_path / "feather.db")
    database.init_database()
    return tmp_path


def run_cli(*argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(list(argv))
    return excinfo.value.code


class TestParser:
    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        assert args.subcommand is None
        assert args.config is None
        assert not args.debug

    def test_log_level_is_case_insensitive(self):
        args = cli.build_parser().parse_args(["--log-level", "debug"])
        assert args.log_level == "DEBUG"

    def test_playlists_name_optional(self):
        parser = cli.build_parser()
        assert parser.parse_args(["playlists"]).name is None
        assert parser.parse_args(["playlists", "Road Trip"]).name == "Road Trip"


class TestSubcommands:
    def test_history(self, library, capsys):
        database.append_history(make_track(1))
        assert run_cli("history") == 0
        assert "Song 1" in capsys.readouterr().out

    def test_clear_history(self, library, capsys):
        database.append_history(make_track(1))
        database.append_history(make_track(2))
        assert run_cli("history", "--clear") == 0
        assert "Cleared 2" in capsys.readouterr().out
        assert database.list_history() == []

    def test_empty_history(self, library, capsys):
        assert run_cli("history") == 0
        assert "No history yet" in capsys.readouterr().out

    def test_playlists(self, library, capsys):
        database.create_playlist("Mix")
        database.add_track_to_playlist("Mix", make_track(2))

        assert run_cli("playlists") == 0
        assert "Mix" in capsys.readouterr().out

        assert run_cli("playlists", "Mix") == 0
        assert "Song 2" in capsys.readouterr().out

    def test_missing_playlist_exits_with_error(self, library, capsys):
        assert run_cli("playlists", "Nope") == 1
        assert "not found" in capsys.readouterr().out

    def test_missing_config_exits_with_error(self, library, capsys):
        assert run_cli("--config", str(library / "absent.toml"), "history") == 1
