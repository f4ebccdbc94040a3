# Area: CLI Tests
"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import pytest

from cf_battle import cli
from cf_battle._match.results import build_results
from cf_battle._match.scoreboard import Scoreboard
from cf_battle._runner_config import ENV_MAPPINGS
from cf_battle._store import MatchRepository
from cf_battle.invite import decode_invite, encode_invite
from cf_battle.models import load_match_config

T0 = 1_700_000_000_000

CONFIG = {
    "matchId": "match-cli",
    "players": [{"handle": "alice"}, {"handle": "bob"}],
    "problems": [{"contestId": 1850, "index": "A", "rating": 800}],
    "startTime": T0,
    "endTime": T0 + 600_000,
}


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    for key in ENV_MAPPINGS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BATTLE_DB_PATH", str(tmp_path / "cli.db"))


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "match.json"
    path.write_text(json.dumps(CONFIG))
    return str(path)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_run_with_config(self):
        args = cli.parse_args(["run", "--config", "m.json"])
        assert args.command == "run"
        assert args.config == "m.json"

    def test_run_requires_a_source(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["run"])

    def test_config_and_invite_exclusive(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["run", "--config", "m.json", "--invite", "v1.x"])

    def test_settings_is_global(self):
        args = cli.parse_args(["--settings", "s.json", "list"])
        assert args.settings == "s.json"


class TestInviteCommand:
    """Tests for `invite`."""

    def test_prints_code(self, config_file, capsys):
        assert cli.main(["invite", "--config", config_file]) == 0
        code = capsys.readouterr().out.strip()
        assert decode_invite(code).match_id == "match-cli"

    def test_prints_link(self, config_file, capsys):
        assert cli.main(["invite", "--config", config_file, "--base-url", "https://b.test/"]) == 0
        assert capsys.readouterr().out.startswith("https://b.test/?invite=v1.")

    def test_invalid_config_file(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({**CONFIG, "players": []}))
        assert cli.main(["invite", "--config", str(path)]) == 1
        assert "MATCH NOT STARTED" in capsys.readouterr().err

    def test_missing_file(self, capsys):
        assert cli.main(["invite", "--config", "nope.json"]) == 1
        assert "Error" in capsys.readouterr().err


class TestRunCommand:
    """Tests for `run`."""

    def test_runs_from_config(self, config_file):
        with patch("cf_battle.runner.MatchRunner") as runner_cls:
            runner_cls.return_value.run.return_value = object()
            assert cli.main(["run", "--config", config_file]) == 0
        config = runner_cls.call_args.args[0]
        assert config.match_id == "match-cli"

    def test_runs_from_invite(self):
        code = encode_invite(load_match_config(CONFIG))
        with patch("cf_battle.runner.MatchRunner") as runner_cls:
            runner_cls.return_value.run.return_value = object()
            assert cli.main(["run", "--invite", code]) == 0
        assert runner_cls.call_args.args[0].match_id == "match-cli"

    def test_abandoned_exit_code(self, config_file):
        with patch("cf_battle.runner.MatchRunner") as runner_cls:
            runner_cls.return_value.run.return_value = None
            assert cli.main(["run", "--config", config_file]) == 2

    def test_bad_invite(self, capsys):
        assert cli.main(["run", "--invite", "v7.abc"]) == 1
        assert "unsupported invite version" in capsys.readouterr().err


class TestResultsCommands:
    """Tests for `results` and `list`."""

    def test_results_not_found(self, capsys):
        assert cli.main(["results", "match-none"]) == 1
        assert "No results" in capsys.readouterr().err

    def test_results_printed(self, tmp_path, capsys):
        config = load_match_config(CONFIG)
        MatchRepository(str(tmp_path / "cli.db")).save_results(
            build_results(Scoreboard(config), ended_at=T0 + 600_000)
        )

        assert cli.main(["results", "match-cli"]) == 0
        out = capsys.readouterr().out
        assert "Winner: none" in out
        assert "alice" in out and "bob" in out

    def test_results_json(self, tmp_path, capsys):
        config = load_match_config(CONFIG)
        MatchRepository(str(tmp_path / "cli.db")).save_results(
            build_results(Scoreboard(config), ended_at=T0 + 600_000)
        )
        assert cli.main(["results", "match-cli", "--json"]) == 0
        assert json.loads(capsys.readouterr().out)["match_id"] == "match-cli"

    def test_list_empty(self, capsys):
        assert cli.main(["list"]) == 0
        assert "No stored matches" in capsys.readouterr().out

    def test_list_rows(self, tmp_path, capsys):
        MatchRepository(str(tmp_path / "cli.db")).save_config(load_match_config(CONFIG))
        assert cli.main(["list"]) == 0
        assert "match-cli  winner: not finished" in capsys.readouterr().out


class TestSettingsLoading:
    """Tests for --settings handling."""

    def test_bad_settings_file(self, tmp_path, capsys):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"poll_interval_seconds": -1}))
        assert cli.main(["--settings", str(path), "list"]) == 1
        assert "could not load settings" in capsys.readouterr().err
