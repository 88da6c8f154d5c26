"""Console output for release runs.

All user-facing messages go through ReleaseLog so that the orchestrator,
the shell executor and plugins share one rich Console and one notion of
verbosity. Tests replace it with ``MagicMock(spec=ReleaseLog)``.
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel


class ReleaseLog:
    """Rich-backed logger collaborator."""

    def __init__(self, console: Console | None = None, verbose: bool = False) -> None:
        self.console = console or Console()
        self.is_verbose = verbose

    def log(self, message: str) -> None:
        self.console.print(message)

    def info(self, message: str) -> None:
        self.console.print(f"[cyan]{escape(message)}[/cyan]")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]WARNING[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]ERROR[/red] {escape(message)}")

    def verbose(self, message: str) -> None:
        if self.is_verbose:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def obtrusive(self, message: str) -> None:
        """Print a message that should stand out (run banner)."""
        self.console.print()
        self.console.print(f"[bold]{escape(message)}[/bold]")
        self.console.print()

    def preview(self, title: str, text: str) -> None:
        if not text:
            return
        self.console.print(Panel(escape(text), title=title, border_style="cyan"))

    def exec(self, command: str, dry_run: bool = False, external: bool = False) -> None:
        """Echo a command about to run.

        External (user hook) commands are always shown; plugin-internal
        commands only in verbose mode or when skipped by a dry run.
        """
        if not (external or dry_run or self.is_verbose):
            return
        prefix = "[yellow]$[/yellow]" if dry_run else "[dim]$[/dim]"
        self.console.print(f"{prefix} {escape(command)}")
