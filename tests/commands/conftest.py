"""Fixtures for CLI command tests: an engine over in-memory storage."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from planwise.services.backlog import BacklogService
from planwise.services.context_manager import Engine
from planwise.services.lifecycle import OccurrenceLifecycleManager
from planwise.services.task_service import TaskService


@pytest.fixture()
def engine(storage) -> Engine:
    lifecycle = OccurrenceLifecycleManager(storage)
    return Engine(
        storage=storage,
        tasks=TaskService(storage, lifecycle),
        lifecycle=lifecycle,
        backlog=BacklogService(storage),
    )


@pytest.fixture()
def patch_engine(engine):
    """Route get_engine() in every command module to the in-memory engine."""
    targets = [
        "planwise.commands.tasks.get_engine",
        "planwise.commands.occurrences.get_engine",
        "planwise.commands.backlog.get_engine",
    ]
    patchers = [patch(target, return_value=engine) for target in targets]
    for patcher in patchers:
        patcher.start()
    yield engine
    for patcher in patchers:
        patcher.stop()
