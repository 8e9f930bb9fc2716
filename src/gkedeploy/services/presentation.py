"""Console presentation of classified output and pipeline progress."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gkedeploy.models import ClassifiedLine, Severity

SEVERITY_STYLES = {
    Severity.NORMAL: "dim",
    Severity.ERROR: "red",
}

STATUS_STYLES = {
    "success": "green",
    "failed": "bold red",
    "skipped": "dim",
    "running": "yellow",
}


class ConsolePresenter:
    """Maps severities and stage events to rich styles."""

    def __init__(self, console: Console):
        self.console = console

    def show(self, line: ClassifiedLine):
        style = SEVERITY_STYLES[line.severity]
        self.console.print(f"[{style}]{escape(line.text)}[/{style}]")

    def announce(self, message: str):
        self.console.print(f"[cyan]{escape(message)}[/cyan]")

    def note(self, message: str):
        self.console.print(f"[dim]{escape(message)}[/dim]")

    def success(self, message: str):
        self.console.print(f"[green]{escape(message)}[/green]")

    def failure(self, message: str):
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def summary(self, steps):
        table = Table(title="Pipeline summary")
        table.add_column("Stage")
        table.add_column("Status")
        table.add_column("Duration", justify="right")

        for step in steps:
            style = STATUS_STYLES.get(step["status"], "white")
            duration = step.get("duration_seconds")
            table.add_row(
                step["name"],
                f"[{style}]{step['status']}[/{style}]",
                f"{duration:.1f}s" if duration is not None else "-",
            )

        self.console.print(table)
