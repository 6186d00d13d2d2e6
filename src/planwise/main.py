"""Main entry point for the planwise CLI."""

import typer

from planwise import __version__
from planwise.commands import backlog, config, occurrences, tasks
from planwise.utils.typer_helpers import SuggestingGroup
from planwise.utils.ui.console import get_console

app = typer.Typer(
    name="planwise",
    cls=SuggestingGroup,
    help="Recurring task planner: occurrences, quotas, backlog and urgency",
    no_args_is_help=True,
)

console = get_console()

app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(occurrences.app, name="occurrences", help="Occurrence commands")
app.add_typer(backlog.app, name="backlog", help="Backlog detection and resolution")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]planwise[/bold] version [cyan]{__version__}[/cyan]")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
