"""Output formatters for different formats."""

import json
from datetime import datetime
from typing import Any

import yaml
from rich.table import Table

from planwise.models import BacklogReport, Occurrence, OccurrenceStatus, Task
from planwise.utils.ui.console import get_console

console = get_console()

STATUS_STYLES = {
    OccurrenceStatus.PENDING: "yellow",
    OccurrenceStatus.IN_PROGRESS: "cyan",
    OccurrenceStatus.COMPLETED: "green",
    OccurrenceStatus.SKIPPED: "dim",
}


def format_output(data: Any, output_format: str = "table") -> None:
    """Format and display plain data (dicts and lists) based on format."""
    if output_format == "json":
        console.print_json(json.dumps(data, default=str))
    elif output_format == "yaml":
        console.print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    elif isinstance(data, dict):
        format_single_item(data)
    elif isinstance(data, list) and data and isinstance(data[0], dict):
        format_dict_table(data)
    elif not data:
        console.print("[yellow]No data to display[/yellow]")
    else:
        console.print(data)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, datetime):
        return format_datetime(value)
    if value is None:
        return "-"
    return str(value)


def format_dict_table(items: list[dict]) -> None:
    """Format a list of dictionaries as a table."""
    table = Table(show_header=True, header_style="bold magenta")
    columns = list(items[0].keys())
    for col in columns:
        table.add_column(col.replace("_", " ").title())
    for item in items:
        table.add_row(*(_cell(item.get(col)) for col in columns))
    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")
    for key, value in item.items():
        if isinstance(value, dict):
            value = json.dumps(value, default=str)
        table.add_row(key.replace("_", " ").title(), _cell(value))
    console.print(table)


def format_datetime(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


def urgency_style(urgency: float) -> str:
    if urgency >= 10:
        return "bold red"
    if urgency >= 6:
        return "orange3"
    if urgency > 0:
        return "yellow"
    return "dim"


def format_occurrences_table(occurrences: list[Occurrence]) -> None:
    """Render occurrences with status and freshly computed urgency."""
    if not occurrences:
        console.print("[yellow]No occurrences found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Start")
    table.add_column("Target")
    table.add_column("Limit")
    table.add_column("Status")
    table.add_column("Urgency", justify="right")

    for occurrence in occurrences:
        status_style = STATUS_STYLES[occurrence.status]
        table.add_row(
            occurrence.id,
            format_datetime(occurrence.start_date),
            format_datetime(occurrence.target_date),
            format_datetime(occurrence.limit_date),
            f"[{status_style}]{occurrence.status.value}[/{status_style}]",
            f"[{urgency_style(occurrence.urgency)}]{occurrence.urgency:.2f}[/]",
        )
    console.print(table)


def format_task(task: Task, task_type: str) -> None:
    """Render one task with its recurrence summary."""
    item: dict[str, Any] = {
        "id": task.id,
        "name": task.name,
        "type": task_type,
        "importance": task.importance,
        "active": task.is_active,
    }
    if task.is_fixed:
        item["slot"] = f"{task.fixed_start_time}-{task.fixed_end_time}"

    recurrence = task.recurrence
    if recurrence is not None:
        item["interval"] = recurrence.interval
        item["days_of_week"] = [day.value for day in recurrence.days_of_week or []]
        item["days_of_month"] = recurrence.days_of_month
        item["max_occurrences"] = recurrence.max_occurrences
        item["completed_this_period"] = recurrence.period.completed_occurrences
        item["period_start"] = recurrence.period.last_period_start
        item["end_date"] = recurrence.end_date
    format_single_item(item)


def format_backlog_report(report: BacklogReport) -> None:
    format_single_item(
        {
            "pending": report.pending_count,
            "oldest_pending": report.oldest_pending_date,
            "overdue": report.overdue_count,
            "estimated_missing": report.estimated_missing_count,
            "severe": report.has_severe_backlog,
        }
    )


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")
