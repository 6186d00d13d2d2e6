"""Unit tests for the 'config' command group.

Config files land in tmp_path through the autouse isolation fixture.
"""

from __future__ import annotations

from typer.testing import CliRunner

from planwise.commands.config import parse_value
from planwise.config import get_config_manager
from planwise.main import app

runner = CliRunner()


class TestParseValue:
    def test_numbers_and_literals(self):
        assert parse_value("3") == 3
        assert parse_value("2.5") == 2.5
        assert parse_value("true") is True
        assert parse_value("null") is None

    def test_plain_string(self):
        assert parse_value("DEBUG") == "DEBUG"


class TestHelpFlags:
    def test_config_help(self):
        result = runner.invoke(app, ["config", "--help"])
        assert result.exit_code == 0
        assert "view" in result.output


# ---------------------------------------------------------------------------
# view / get
# ---------------------------------------------------------------------------


def test_view_json():
    result = runner.invoke(app, ["config", "view", "--output", "json"])

    assert result.exit_code == 0, result.output
    assert '"max_backlog_iterations": 1000' in result.output


def test_get_known_key():
    result = runner.invoke(app, ["config", "get", "engine.max_backlog_iterations"])

    assert result.exit_code == 0, result.output
    assert "1000" in result.output


def test_get_unset_key_prints_null():
    result = runner.invoke(app, ["config", "get", "storage.db_path"])

    assert result.exit_code == 0, result.output
    assert "null" in result.output


# ---------------------------------------------------------------------------
# set / reset
# ---------------------------------------------------------------------------


class TestSet:
    def test_set_persists(self):
        result = runner.invoke(app, ["config", "set", "engine.max_backlog_iterations", "50"])

        assert result.exit_code == 0, result.output
        assert get_config_manager().config.engine.max_backlog_iterations == 50
        assert get_config_manager().config_file.exists()

    def test_unknown_key_exits_2(self):
        result = runner.invoke(app, ["config", "set", "engine.nope", "1"])

        assert result.exit_code == 2
        assert "Unknown configuration key 'engine.nope'" in result.output

    def test_invalid_value_exits_2(self):
        result = runner.invoke(app, ["config", "set", "engine.max_backlog_iterations", "0"])

        assert result.exit_code == 2
        assert get_config_manager().config.engine.max_backlog_iterations == 1000


class TestReset:
    def test_reset_key(self):
        runner.invoke(app, ["config", "set", "logging.level", "DEBUG"])

        result = runner.invoke(app, ["config", "reset", "logging.level", "--yes"])

        assert result.exit_code == 0, result.output
        assert get_config_manager().config.logging.level == "INFO"

    def test_reset_cancelled(self):
        runner.invoke(app, ["config", "set", "logging.level", "DEBUG"])

        result = runner.invoke(app, ["config", "reset"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert get_config_manager().config.logging.level == "DEBUG"

    def test_reset_everything(self):
        runner.invoke(app, ["config", "set", "engine.backlog_timeout", "5"])

        result = runner.invoke(app, ["config", "reset"], input="y\n")

        assert result.exit_code == 0, result.output
        assert get_config_manager().config.engine.backlog_timeout is None
