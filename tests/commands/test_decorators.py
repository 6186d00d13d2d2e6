"""Unit tests for command decorators."""

from unittest.mock import patch

import pytest
import typer
from pydantic import BaseModel, ValidationError

from planwise.commands.decorators import AppError, command_wrapper, exit_code_for
from planwise.exceptions import (
    ConfigurationError,
    InvalidTransitionError,
    NotFoundError,
)


class _Strict(BaseModel):
    value: int


def _validation_error() -> ValidationError:
    try:
        _Strict(value="not a number")
    except ValidationError as e:
        return e
    raise AssertionError("expected a ValidationError")


class TestAppError:
    def test_default_exit_code(self):
        err = AppError("boom")
        assert str(err) == "boom"
        assert err.exit_code == 1

    def test_custom_exit_code(self):
        assert AppError("bad", exit_code=2).exit_code == 2


class TestExitCodeFor:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (NotFoundError("Task", "x"), 5),
            (InvalidTransitionError("Completed", "Skipped"), 6),
            (ConfigurationError("bad"), 2),
            (KeyError("engine.nope"), 2),
            (AppError("custom", 7), 7),
            (RuntimeError("boom"), 1),
        ],
    )
    def test_mapping(self, error, code):
        assert exit_code_for(error) == code

    def test_validation_error(self):
        assert exit_code_for(_validation_error()) == 2


class TestCommandWrapper:
    def test_sync_return_value(self):
        @command_wrapper
        def cmd():
            return 42

        assert cmd() == 42

    def test_async_function_runs(self):
        @command_wrapper
        async def cmd(x):
            return x * 2

        assert cmd(4) == 8

    def test_engine_error_maps_to_exit(self):
        @command_wrapper
        async def cmd():
            raise NotFoundError("Occurrence", "abc")

        with patch("planwise.commands.decorators.format_error") as mock_error:
            with pytest.raises(typer.Exit) as exc_info:
                cmd()
        assert exc_info.value.exit_code == 5
        mock_error.assert_called_once_with("Occurrence 'abc' not found")

    def test_key_error_message_unquoted(self):
        @command_wrapper
        def cmd():
            raise KeyError("Unknown configuration key 'x'")

        with patch("planwise.commands.decorators.format_error") as mock_error:
            with pytest.raises(typer.Exit):
                cmd()
        mock_error.assert_called_once_with("Unknown configuration key 'x'")

    def test_unexpected_error_exits_1(self):
        @command_wrapper
        def cmd():
            raise RuntimeError("kaboom")

        with patch("planwise.commands.decorators.format_error") as mock_error:
            with pytest.raises(typer.Exit) as exc_info:
                cmd()
        assert exc_info.value.exit_code == 1
        assert "kaboom" in mock_error.call_args[0][0]

    def test_typer_exit_passes_through(self):
        @command_wrapper
        def cmd():
            raise typer.Exit(0)

        with pytest.raises(typer.Exit) as exc_info:
            cmd()
        assert exc_info.value.exit_code == 0

    def test_preserves_name(self):
        @command_wrapper
        def my_command():
            """Doc."""

        assert my_command.__name__ == "my_command"
        assert my_command.__doc__ == "Doc."
