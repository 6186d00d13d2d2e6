"""Tests for output formatters."""

from __future__ import annotations

import io
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from rich.console import Console

from planwise.models import (
    BacklogReport,
    Occurrence,
    OccurrenceStatus,
    Recurrence,
    Task,
)
from planwise.utils.ui import formatters

NOW = datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture()
def output():
    """Swap the module console for a wide in-memory one."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, color_system=None)
    with patch.object(formatters, "console", console):
        yield buffer


class TestFormatOutput:
    def test_json(self, output):
        formatters.format_output({"a": 1, "when": NOW}, "json")
        assert '"a": 1' in output.getvalue()
        assert "2024-06-01" in output.getvalue()

    def test_yaml(self, output):
        formatters.format_output({"name": "Run", "tags": ["x"]}, "yaml")
        assert "name: Run" in output.getvalue()
        assert "- x" in output.getvalue()

    def test_dict_table(self, output):
        formatters.format_output({"max_backlog_iterations": 1000}, "table")
        assert "Max Backlog Iterations" in output.getvalue()

    def test_list_table(self, output):
        formatters.format_output([{"id": "a", "ok": True}, {"id": "b", "ok": False}])
        text = output.getvalue()
        assert "✓" in text
        assert "✗" in text

    def test_empty(self, output):
        formatters.format_output([], "table")
        assert "No data to display" in output.getvalue()


def test_format_datetime():
    assert formatters.format_datetime(NOW) == "2024-06-01 10:00"
    assert formatters.format_datetime(None) == "-"


@pytest.mark.parametrize(
    ("urgency", "style"),
    [(0.0, "dim"), (0.5, "yellow"), (6.0, "orange3"), (12.0, "bold red")],
)
def test_urgency_style(urgency, style):
    assert formatters.urgency_style(urgency) == style


def test_occurrences_table(output):
    occurrence = Occurrence(
        id="occ-1",
        task_id="task-1",
        start_date=NOW,
        limit_date=NOW,
        status=OccurrenceStatus.IN_PROGRESS,
        urgency=10.5,
        created_at=NOW,
    )
    formatters.format_occurrences_table([occurrence])
    text = output.getvalue()
    assert "occ-1" in text
    assert "InProgress" in text
    assert "10.50" in text


def test_task_with_recurrence(output):
    task = Task(
        id="task-1",
        owner_id="local",
        name="Gym",
        recurrence=Recurrence(id="rec-1", days_of_week=["Mon", "Thu"], max_occurrences=2),
        created_at=NOW,
    )
    formatters.format_task(task, "finite_recurring")
    text = output.getvalue()
    assert "Mon, Thu" in text
    assert "finite_recurring" in text


def test_backlog_report(output):
    formatters.format_backlog_report(
        BacklogReport(overdue_count=2, estimated_missing_count=4, has_severe_backlog=True)
    )
    text = output.getvalue()
    assert "Estimated Missing" in text
    assert "4" in text


def test_messages(output):
    formatters.format_error("nope")
    formatters.format_success("done")
    formatters.format_warning("careful")
    formatters.format_info("fyi")
    text = output.getvalue()
    assert "Error: nope" in text
    assert "Success: done" in text
    assert "Warning: careful" in text
    assert "Info: fyi" in text
