"""Tests for ride_tools CLI commands."""

import argparse
import json
import logging

import pytest

from ride_tools.config import Config


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Run from an empty project with no user config."""
    (tmp_path / ".git").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("ride_tools.config.USER_CONFIG_PATH", tmp_path / "user" / "config.toml")
    monkeypatch.setattr(
        "ride_tools.cli.config_cmd.USER_CONFIG_PATH", tmp_path / "user" / "config.toml"
    )
    return tmp_path


class TestCLIMain:
    """Tests for the main CLI dispatcher."""

    def test_no_command_shows_help(self, capsys):
        from ride_tools.cli import main

        assert main([]) == 0
        assert "remote-control" in capsys.readouterr().out

    def test_version_flag(self, capsys):
        from ride_tools import __version__
        from ride_tools.cli import main

        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_unknown_command(self):
        from ride_tools.cli import main

        with pytest.raises(SystemExit) as exc_info:
            main(["unknown"])

        # argparse exits with error for invalid choice
        assert exc_info.value.code == 2


class TestPiecesCommand:
    """Tests for the pieces CLI command."""

    def test_pieces_json(self, capsys):
        from ride_tools.cli import main

        assert main(["pieces", "--format", "json"]) == 0

        data = json.loads(capsys.readouterr().out)
        flat = next(p for p in data if p["type"] == 0)
        assert flat == {
            "type": 0,
            "name": "FLAT",
            "description": "Flat",
            "group": "flat",
            "exitState": "flat",
        }

    def test_pieces_group_filter(self, capsys):
        from ride_tools.cli import main

        assert main(["pieces", "--format", "json", "--group", "station"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert {p["name"] for p in data} == {"BEGIN_STATION", "END_STATION", "MIDDLE_STATION"}
        assert all(p["exitState"] == "station" for p in data)

    def test_pieces_table(self, capsys):
        from ride_tools.cli import main

        assert main(["pieces"]) == 0
        out = capsys.readouterr().out
        assert "Track Pieces" in out
        assert "Total:" in out

    def test_pieces_empty_group(self, capsys):
        from ride_tools.cli import main

        assert main(["pieces", "--group", "teleporter"]) == 0
        assert "No pieces" in capsys.readouterr().out


class TestNextCommand:
    """Tests for the next CLI command."""

    def test_next_json(self, capsys):
        from ride_tools.cli import main

        # FLAT_TO_UP_25 leaves the track climbing
        assert main(["next", "6", "--format", "json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["lastPieceType"] == 6
        assert data["stateCategory"] == "up25"
        assert 4 in data["validPieces"]  # UP_25
        assert 0 not in data["validPieces"]  # FLAT
        assert data["validPieces"] == sorted(data["validPieces"])

    def test_next_station_hint(self, capsys):
        from ride_tools.cli import main

        assert main(["next", "0", "--station", "--format", "json"]) == 0
        assert json.loads(capsys.readouterr().out)["stateCategory"] == "station"

    def test_next_unknown_piece_warns(self, capsys):
        from ride_tools.cli import main

        assert main(["next", "999"]) == 0
        out = capsys.readouterr().out
        assert "Unknown piece type 999" in out
        assert "Legal Next Pieces" in out


class TestConfigCommand:
    """Tests for the config CLI command."""

    def test_paths(self, isolated_config, capsys):
        from ride_tools.cli import main

        assert main(["config", "--paths"]) == 0
        out = capsys.readouterr().out
        assert "User config:" in out
        assert "not found" in out

    def test_init_creates_template(self, isolated_config, capsys):
        from ride_tools.cli import main

        assert main(["config", "--init"]) == 0
        target = isolated_config / ".ride-tools.toml"
        assert target.is_file()
        assert "[track]" in target.read_text()

    def test_init_refuses_overwrite(self, isolated_config, capsys):
        from ride_tools.cli import main

        (isolated_config / ".ride-tools.toml").write_text("[server]\nport = 1\n")

        assert main(["config", "--init"]) == 1
        assert "already exists" in capsys.readouterr().err

    def test_init_user(self, isolated_config):
        from ride_tools.cli import main

        assert main(["config", "--init", "--user"]) == 0
        assert (isolated_config / "user" / "config.toml").is_file()

    def test_show(self, isolated_config, capsys):
        from ride_tools.cli import main

        (isolated_config / ".ride-tools.toml").write_text("[server]\nport = 9001\n")

        assert main(["config", "--show"]) == 0
        out = capsys.readouterr().out
        assert "port = 9001  # from: .ride-tools.toml" in out
        assert "circuit_origin = # not set  # from: default" in out

    def test_show_invalid_config(self, isolated_config, capsys):
        from ride_tools.cli import main

        (isolated_config / ".ride-tools.toml").write_text("not [ toml")

        assert main(["config", "--show"]) == 1
        assert "Invalid TOML" in capsys.readouterr().err


class TestServeCommand:
    """Tests for the serve CLI command."""

    def _args(self, **overrides):
        values = {"host": None, "port": None, "timeout": None, "latency": None, "debug": False}
        values.update(overrides)
        return argparse.Namespace(**values)

    def test_apply_overrides(self):
        from ride_tools.cli.serve_cmd import apply_overrides

        config = apply_overrides(
            Config(), self._args(host="0.0.0.0", port=9999, timeout=1.5, latency=0.25)
        )

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9999
        assert config.actions.timeout_seconds == 1.5
        assert config.sandbox.latency_seconds == 0.25

    def test_no_overrides_keeps_config(self):
        from ride_tools.cli.serve_cmd import apply_overrides

        config = apply_overrides(Config(), self._args())
        assert config.server.port == 8080
        assert config.actions.timeout_seconds == 10.0

    def test_bind_failure(self, isolated_config, monkeypatch, capsys):
        from ride_tools.cli.serve_cmd import run_serve

        async def refuse(config):
            raise OSError("address already in use")

        monkeypatch.setattr("ride_tools.api.server.serve", refuse)

        assert run_serve(self._args(port=1)) == 1
        assert "address already in use" in capsys.readouterr().err

    def test_bad_config(self, isolated_config, capsys):
        from ride_tools.cli.serve_cmd import run_serve

        (isolated_config / ".ride-tools.toml").write_text("[actions]\ntimeout_seconds = 'soon'\n")

        assert run_serve(self._args()) == 1
        assert "timeout_seconds" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "toml,debug,expected",
        [
            ("", False, logging.INFO),
            ("[defaults]\nverbose = true\n", False, logging.DEBUG),
            ("[defaults]\nquiet = true\n", False, logging.WARNING),
            ("[defaults]\nquiet = true\n", True, logging.DEBUG),
            ("[defaults]\nverbose = true\nquiet = true\n", False, logging.DEBUG),
        ],
    )
    def test_defaults_set_log_level(self, isolated_config, monkeypatch, toml, debug, expected):
        """The [defaults] section picks the level the server logs at."""
        from ride_tools.cli.serve_cmd import run_serve

        (isolated_config / ".ride-tools.toml").write_text(toml)
        levels = []

        async def idle(config):
            return None

        monkeypatch.setattr("ride_tools.api.server.serve", idle)
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: levels.append(kwargs["level"]))

        assert run_serve(self._args(debug=debug)) == 0
        assert levels == [expected]
