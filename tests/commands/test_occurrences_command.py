"""Unit tests for the 'occurrences' command group."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from typer.testing import CliRunner

from planwise.main import app
from planwise.models import (
    CalendarEventCreate,
    OccurrenceStatus,
    RecurrenceCreate,
    TaskCreate,
)

runner = CliRunner()


def _create(engine, **recurrence):
    data = TaskCreate(
        name="Run", recurrence=RecurrenceCreate(**recurrence) if recurrence else None
    )
    task = asyncio.run(engine.tasks.create_task("local", data))
    occurrence = asyncio.run(engine.storage.occurrences.get_latest(task.id))
    return task, occurrence


def _statuses(engine, task_id):
    occurrences = asyncio.run(engine.storage.occurrences.list_by_task(task_id))
    return [o.status for o in occurrences]


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


class TestList:
    def test_table(self, patch_engine):
        task, _ = _create(patch_engine, interval=7)

        result = runner.invoke(app, ["occurrences", "list", task.id])

        assert result.exit_code == 0, result.output
        assert "Error" not in result.output

    def test_json(self, patch_engine):
        task, occurrence = _create(patch_engine, interval=7)

        result = runner.invoke(app, ["occurrences", "list", task.id, "-o", "json"])

        assert result.exit_code == 0, result.output
        assert occurrence.id in result.output
        assert '"status": "Pending"' in result.output

    def test_empty(self, patch_engine):
        task = asyncio.run(
            patch_engine.storage.tasks.add("local", TaskCreate(name="Run"))
        )

        result = runner.invoke(app, ["occurrences", "list", task.id])

        assert result.exit_code == 0
        assert "No occurrences found" in result.output


# ---------------------------------------------------------------------------
# start / complete / skip
# ---------------------------------------------------------------------------


class TestTransitions:
    def test_complete_chains_next(self, patch_engine):
        task, occurrence = _create(patch_engine, interval=7)

        result = runner.invoke(app, ["occurrences", "complete", occurrence.id])

        assert result.exit_code == 0, result.output
        assert "completed" in result.output
        assert "Next occurrence starts" in result.output
        assert _statuses(patch_engine, task.id) == [
            OccurrenceStatus.COMPLETED,
            OccurrenceStatus.PENDING,
        ]

    def test_skip_last_single_finishes_task(self, patch_engine):
        task, occurrence = _create(patch_engine)

        result = runner.invoke(app, ["occurrences", "skip", occurrence.id])

        assert result.exit_code == 0, result.output
        assert "Task finished" in result.output
        assert _statuses(patch_engine, task.id) == [OccurrenceStatus.SKIPPED]

    def test_complete_twice_exits_6(self, patch_engine):
        _, occurrence = _create(patch_engine)
        runner.invoke(app, ["occurrences", "complete", occurrence.id])

        result = runner.invoke(app, ["occurrences", "complete", occurrence.id])

        assert result.exit_code == 6
        assert "Cannot move occurrence" in result.output

    def test_start(self, patch_engine):
        task, occurrence = _create(patch_engine, interval=7)

        result = runner.invoke(app, ["occurrences", "start", occurrence.id])

        assert result.exit_code == 0, result.output
        assert _statuses(patch_engine, task.id) == [OccurrenceStatus.IN_PROGRESS]

    def test_unknown_occurrence_exits_5(self, patch_engine):
        result = runner.invoke(app, ["occurrences", "start", "nope"])
        assert result.exit_code == 5


# ---------------------------------------------------------------------------
# next / sync-time
# ---------------------------------------------------------------------------


class TestNext:
    def test_noop_while_active(self, patch_engine):
        task, _ = _create(patch_engine, interval=7)

        result = runner.invoke(app, ["occurrences", "next", task.id])

        assert result.exit_code == 0, result.output
        assert "No occurrence created" in result.output

    def test_preview(self, patch_engine):
        task, occurrence = _create(patch_engine, interval=7)
        expected = (occurrence.start_date + timedelta(days=7)).strftime("%Y-%m-%d %H:%M")

        result = runner.invoke(app, ["occurrences", "next", task.id, "--preview"])

        assert result.exit_code == 0, result.output
        assert expected in result.output

    def test_creates_after_resolution(self, patch_engine):
        data = TaskCreate(name="Run", recurrence=RecurrenceCreate(interval=7))
        task = asyncio.run(patch_engine.storage.tasks.add("local", data, data.recurrence))

        result = runner.invoke(app, ["occurrences", "next", task.id])

        assert result.exit_code == 0, result.output
        assert "Created occurrence" in result.output

    def test_task_without_recurrence_exits_2(self, patch_engine):
        task, _ = _create(patch_engine)

        result = runner.invoke(app, ["occurrences", "next", task.id])

        assert result.exit_code == 2
        assert "recurrence" in result.output


def test_sync_time(patch_engine):
    _, occurrence = _create(patch_engine)
    start = datetime(2030, 1, 1, 9, tzinfo=timezone.utc)
    event = asyncio.run(
        patch_engine.storage.events.add(
            CalendarEventCreate(
                owner_id="local",
                occurrence_id=occurrence.id,
                start=start,
                finish=start + timedelta(hours=2),
            )
        )
    )
    store = patch_engine.storage.strategy.store
    store.events[event.id] = event.model_copy(update={"dedicated_time": 1.75})

    result = runner.invoke(app, ["occurrences", "sync-time", occurrence.id])

    assert result.exit_code == 0, result.output
    assert "1.75h" in result.output
