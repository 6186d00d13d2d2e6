"""Shared test fixtures and configuration.

Keeps logs, config files and databases inside tmp_path, and provides an
in-memory storage context for engine tests.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from planwise.models import RecurrenceCreate, TaskCreate
from planwise.models.strategy import MemoryStrategy, StrategyContext


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolate_user_dirs(tmp_path):
    """Point platformdirs lookups at tmp_path and reset module singletons."""
    import planwise.config as config_mod
    import planwise.utils.logger as logger_mod
    from planwise.adapters.sqlite.connection import DatabaseConnection
    from planwise.services.context_manager import get_strategy_context

    tmpdir = str(tmp_path)
    logger_mod._logger = None
    logging.getLogger("planwise").handlers.clear()
    config_mod._config_manager = None
    get_strategy_context.cache_clear()

    with patch("planwise.utils.logger.user_log_dir", return_value=tmpdir):
        with patch("planwise.config.user_config_dir", return_value=tmpdir):
            with patch("planwise.config.user_data_dir", return_value=tmpdir):
                yield

    DatabaseConnection.close_connection()
    logging.getLogger("planwise").handlers.clear()
    logger_mod._logger = None
    config_mod._config_manager = None
    get_strategy_context.cache_clear()


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def storage() -> StrategyContext:
    """Fresh in-memory storage context."""
    return StrategyContext(MemoryStrategy())


@pytest.fixture()
def now() -> datetime:
    """Reference instant close to the wall clock.

    Repositories stamp created_at with the real time, so scenarios stay
    near it to keep urgency meaningful.
    """
    return datetime.now(timezone.utc).replace(microsecond=0)


def _make_task(
    name: str = "Water plants",
    interval: int | None = None,
    days_of_week: list[str] | None = None,
    days_of_month: list[int] | None = None,
    max_occurrences: int | None = None,
    end_date: datetime | None = None,
    **kwargs,
) -> TaskCreate:
    """TaskCreate with an optional recurrence built from the keyword arguments."""
    recurrence = None
    if any(
        v is not None
        for v in (interval, days_of_week, days_of_month, max_occurrences, end_date)
    ):
        recurrence = RecurrenceCreate(
            interval=interval,
            days_of_week=days_of_week,
            days_of_month=days_of_month,
            max_occurrences=max_occurrences,
            end_date=end_date,
        )
    return TaskCreate(name=name, recurrence=recurrence, **kwargs)


@pytest.fixture()
def make_task():
    """Factory for TaskCreate payloads."""
    return _make_task
