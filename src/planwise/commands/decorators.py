"""Decorators for command functions."""

import asyncio
import functools
import time
import traceback
from collections.abc import Callable

import typer
from pydantic import ValidationError

from planwise.exceptions import (
    ConfigurationError,
    InvalidTransitionError,
    NotFoundError,
    PlanwiseError,
)
from planwise.utils import exit_codes
from planwise.utils.logger import get_logger
from planwise.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = exit_codes.ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def exit_code_for(error: Exception) -> int:
    """Semantic exit code for an engine or validation error."""
    if isinstance(error, AppError):
        return error.exit_code
    if isinstance(error, NotFoundError):
        return exit_codes.ERROR_NOT_FOUND
    if isinstance(error, InvalidTransitionError):
        return exit_codes.ERROR_CONFLICT
    if isinstance(error, (ConfigurationError, ValidationError, KeyError)):
        return exit_codes.ERROR_INVALID_ARGS
    return exit_codes.ERROR_GENERAL


def command_wrapper(func: Callable):
    """Run a (possibly async) command, log it and map errors to exit codes."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger("cli")
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            if asyncio.iscoroutinefunction(func):
                result = asyncio.run(func(*args, **kwargs))
            else:
                result = func(*args, **kwargs)

            logger.info("command completed: %s (%.3fs)", cmd, time.monotonic() - start)
            return result

        except typer.Exit:
            # Typer's own exits (--help, explicit Exit(0) after a declined prompt)
            raise

        except (AppError, PlanwiseError, ValidationError, KeyError) as e:
            logger.error(
                "command failed: %s (%.3fs) - %s", cmd, time.monotonic() - start, e
            )
            # KeyError wraps its message in quotes
            message = e.args[0] if isinstance(e, KeyError) and e.args else str(e)
            format_error(message)
            raise typer.Exit(code=exit_code_for(e)) from e

        except Exception as e:
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                time.monotonic() - start,
                e,
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {e}")
            raise typer.Exit(code=exit_codes.ERROR_GENERAL) from e

    return wrapper
