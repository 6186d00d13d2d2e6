"""Backlog commands - detect and bulk-resolve missed occurrences."""

import typer

from planwise.commands.decorators import command_wrapper
from planwise.services.context_manager import get_engine
from planwise.utils.ui.formatters import (
    format_backlog_report,
    format_info,
    format_output,
    format_success,
    format_warning,
)

app = typer.Typer(help="Backlog commands")


@app.command("detect")
@command_wrapper
async def detect_backlog(
    task_id: str = typer.Argument(..., help="Task ID"),
    output: str = typer.Option("table", "--output", "-o", help="table, json or yaml"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Report overdue and missing occurrences of a task."""
    engine = get_engine(profile)
    report = await engine.backlog.detect_backlog(task_id)
    if output == "table":
        format_backlog_report(report)
    else:
        format_output(report.model_dump(mode="json"), output)


@app.command("resolve")
@command_wrapper
async def resolve_backlog(
    task_id: str = typer.Argument(..., help="Task ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Stop after this many seconds"
    ),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Create missing occurrences and skip overdue ones.

    Skipped occurrences cannot be reopened.
    """
    engine = get_engine(profile)
    report = await engine.backlog.detect_backlog(task_id)
    if not report.has_severe_backlog:
        format_info("No backlog to resolve")
        return

    if not yes:
        confirm = typer.confirm(
            f"Create {report.estimated_missing_count} missing occurrence(s) and skip "
            "overdue ones? This cannot be undone."
        )
        if not confirm:
            format_info("Cancelled")
            raise typer.Exit(0)

    result = await engine.backlog.resolve_backlog(task_id, timeout=timeout)
    format_success(
        f"Created {result.created_count}, skipped {result.skipped_count} occurrence(s)"
    )
    if result.truncated:
        format_warning("Stopped early; run again to continue catching up")
