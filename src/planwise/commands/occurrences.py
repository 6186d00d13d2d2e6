"""Occurrence commands - list, start, resolve and chain."""

import typer

from planwise.commands.decorators import command_wrapper
from planwise.services.context_manager import get_engine
from planwise.utils.ui.formatters import (
    format_datetime,
    format_info,
    format_occurrences_table,
    format_output,
    format_success,
)

app = typer.Typer(help="Occurrence commands")


@app.command("list")
@command_wrapper
async def list_occurrences(
    task_id: str = typer.Argument(..., help="Task ID"),
    active: bool = typer.Option(False, "--active", help="Only Pending/InProgress"),
    output: str = typer.Option("table", "--output", "-o", help="table, json or yaml"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """List the occurrences of a task with current urgency."""
    engine = get_engine(profile)
    occurrences = await engine.lifecycle.list_occurrences(task_id, active_only=active)
    if output == "table":
        format_occurrences_table(occurrences)
    else:
        format_output([o.model_dump(mode="json") for o in occurrences], output)


@app.command("start")
@command_wrapper
async def start_occurrence(
    occurrence_id: str = typer.Argument(..., help="Occurrence ID"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Mark an occurrence as in progress."""
    engine = get_engine(profile)
    await engine.lifecycle.start_occurrence(occurrence_id)
    format_success(f"Occurrence {occurrence_id} started")


@app.command("complete")
@command_wrapper
async def complete_occurrence(
    occurrence_id: str = typer.Argument(..., help="Occurrence ID"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Complete an occurrence and schedule the next one."""
    engine = get_engine(profile)
    occurrence = await engine.lifecycle.complete_occurrence(occurrence_id)
    format_success(f"Occurrence {occurrence_id} completed")
    await _report_next(engine, occurrence.task_id)


@app.command("skip")
@command_wrapper
async def skip_occurrence(
    occurrence_id: str = typer.Argument(..., help="Occurrence ID"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Skip an occurrence and schedule the next one."""
    engine = get_engine(profile)
    occurrence = await engine.lifecycle.skip_occurrence(occurrence_id)
    format_success(f"Occurrence {occurrence_id} skipped")
    await _report_next(engine, occurrence.task_id)


async def _report_next(engine, task_id: str) -> None:
    active = await engine.lifecycle.list_occurrences(task_id, active_only=True)
    if active:
        format_info(f"Next occurrence starts {format_datetime(active[-1].start_date)}")
    else:
        task = await engine.tasks.get_task(task_id)
        if not task.is_active:
            format_info("Task finished; no further occurrences")


@app.command("next")
@command_wrapper
async def next_occurrence(
    task_id: str = typer.Argument(..., help="Task ID"),
    preview: bool = typer.Option(
        False, "--preview", help="Only show when the next occurrence would start"
    ),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Create the next occurrence of a recurring task."""
    engine = get_engine(profile)
    if preview:
        next_date = await engine.lifecycle.preview_next_occurrence_date(task_id)
        if next_date is None:
            format_info("Task does not chain further occurrences")
        else:
            format_info(f"Next occurrence would start {format_datetime(next_date)}")
        return

    occurrence = await engine.lifecycle.create_next_occurrence(task_id)
    if occurrence is None:
        format_info("No occurrence created (one is still active or the task ended)")
    else:
        format_success(
            f"Created occurrence {occurrence.id} starting "
            f"{format_datetime(occurrence.start_date)}"
        )


@app.command("sync-time")
@command_wrapper
async def sync_time(
    occurrence_id: str = typer.Argument(..., help="Occurrence ID"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Recompute time consumed from linked calendar events."""
    engine = get_engine(profile)
    occurrence = await engine.lifecycle.sync_time_consumed(occurrence_id)
    format_success(f"Time consumed: {occurrence.time_consumed:.2f}h")
