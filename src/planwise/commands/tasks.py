"""Task management commands."""

from datetime import datetime

import typer

from planwise.commands.decorators import AppError, command_wrapper
from planwise.models import DayOfWeek, RecurrenceCreate, TaskCreate, classify_task_type
from planwise.services.context_manager import get_engine
from planwise.utils import exit_codes
from planwise.utils.clock import ensure_utc
from planwise.utils.ui.formatters import format_output, format_success, format_task

app = typer.Typer(help="Task management commands")

# Single-user local store
LOCAL_OWNER = "local"

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]


def parse_weekdays(value: str | None) -> list[DayOfWeek] | None:
    """Parse "Mon,Thu" into weekday tags."""
    if not value:
        return None
    try:
        return [DayOfWeek(part.strip().capitalize()) for part in value.split(",")]
    except ValueError as e:
        raise AppError(
            f"Invalid weekday list '{value}' (use Sun,Mon,Tue,Wed,Thu,Fri,Sat)",
            exit_codes.ERROR_INVALID_ARGS,
        ) from e


def parse_days_of_month(value: str | None) -> list[int] | None:
    """Parse "1,15,31" into day numbers."""
    if not value:
        return None
    try:
        return [int(part) for part in value.split(",")]
    except ValueError as e:
        raise AppError(
            f"Invalid day-of-month list '{value}'", exit_codes.ERROR_INVALID_ARGS
        ) from e


def _utc(value: datetime | None) -> datetime | None:
    return ensure_utc(value) if value is not None else None


@app.command("add")
@command_wrapper
async def add_task(
    name: str = typer.Argument(..., help="Task name"),
    description: str | None = typer.Option(None, "--description", "-d"),
    importance: int = typer.Option(5, "--importance", "-i", min=1, max=10),
    interval: int | None = typer.Option(None, "--interval", help="Period length in days"),
    weekdays: str | None = typer.Option(None, "--weekdays", help="e.g. Mon,Thu"),
    days_of_month: str | None = typer.Option(None, "--days-of-month", help="e.g. 1,15"),
    max_occurrences: int | None = typer.Option(
        None, "--max-occurrences", help="Quota per period"
    ),
    end_date: datetime | None = typer.Option(None, "--end-date", formats=DATE_FORMATS),
    target_date: datetime | None = typer.Option(
        None, "--target-date", formats=DATE_FORMATS
    ),
    limit_date: datetime | None = typer.Option(None, "--limit-date", formats=DATE_FORMATS),
    hours: float | None = typer.Option(None, "--hours", help="Effort estimate in hours"),
    fixed: bool = typer.Option(False, "--fixed", help="Occupies a fixed time slot"),
    start_time: str | None = typer.Option(None, "--start-time", help="HH:MM"),
    end_time: str | None = typer.Option(None, "--end-time", help="HH:MM"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Create a task and schedule its first occurrence."""
    parsed_weekdays = parse_weekdays(weekdays)
    parsed_days = parse_days_of_month(days_of_month)

    recurrence = None
    if any(
        value is not None
        for value in (interval, parsed_weekdays, parsed_days, max_occurrences, end_date)
    ):
        recurrence = RecurrenceCreate(
            interval=interval,
            days_of_week=parsed_weekdays,
            days_of_month=parsed_days,
            max_occurrences=max_occurrences,
            end_date=_utc(end_date),
        )

    data = TaskCreate(
        name=name,
        description=description,
        importance=importance,
        is_fixed=fixed,
        fixed_start_time=start_time,
        fixed_end_time=end_time,
        recurrence=recurrence,
        target_date=_utc(target_date),
        limit_date=_utc(limit_date),
        target_time_consumption=hours,
    )

    engine = get_engine(profile)
    task = await engine.tasks.create_task(LOCAL_OWNER, data)
    format_success(f"Created task '{task.name}' ({task.id})")


@app.command("show")
@command_wrapper
async def show_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    output: str = typer.Option("table", "--output", "-o", help="table, json or yaml"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Show a task and its recurrence."""
    engine = get_engine(profile)
    task = await engine.tasks.get_task(task_id)
    if output == "table":
        format_task(task, classify_task_type(task))
    else:
        format_output(task.model_dump(mode="json"), output)


@app.command("deactivate")
@command_wrapper
async def deactivate_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Deactivate a task. Its occurrences are kept."""
    engine = get_engine(profile)
    task = await engine.tasks.deactivate_task(task_id)
    format_success(f"Deactivated task '{task.name}'")
