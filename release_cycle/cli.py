"""Command-line interface for release-cycle.

Provides commands for:
- release: Run the release lifecycle
- hooks: Show the configured hooks in execution order
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from release_cycle import __version__
from release_cycle.config.loader import load_config
from release_cycle.exceptions import PluginError, ReleaseError
from release_cycle.hooks import HookResolver
from release_cycle.lifecycle import PhaseOutcome, ReleaseSummary
from release_cycle.log import ReleaseLog
from release_cycle.plugins import PluginRegistry
from release_cycle.prompt import TerminalPrompter
from release_cycle.shell import ShellExecutor
from release_cycle.tasks import TaskRunner

app = typer.Typer(
    name="release-cycle",
    help="Hook-driven release lifecycle for git, GitHub, GitLab and npm",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

OUTCOME_STYLES = {
    PhaseOutcome.EXECUTED: "[green]DONE[/green]",
    PhaseOutcome.SKIPPED: "[dim]SKIP[/dim]",
    PhaseOutcome.CANCELLED: "[yellow]NO[/yellow]",
    PhaseOutcome.FAILED: "[red]FAIL[/red]",
}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"release-cycle version {__version__}")
        raise typer.Exit()


def display_summary(summary: ReleaseSummary) -> None:
    """Print the outcome of every recorded phase."""
    table = Table(title=f"{summary.name} {summary.version or ''}".strip())
    table.add_column("Status", style="bold", width=6)
    table.add_column("Event", style="cyan")
    table.add_column("Namespace")
    table.add_column("Message")

    for result in summary.results:
        table.add_row(
            OUTCOME_STYLES[result.outcome],
            result.event.value,
            result.namespace,
            escape(result.message or ""),
        )

    console.print(table)


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: B008
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Hook-driven release lifecycle.

    Runs init, beforeBump, bump, beforeRelease, release and afterRelease
    for every enabled plugin, with user hooks around each phase.
    """
    pass


@app.command()
def release(
    increment: str | None = typer.Argument(  # noqa: B008
        None,
        help="Bump type (major, minor, patch) or an explicit version",
    ),
    dry_run: bool = typer.Option(  # noqa: B008
        False,
        "--dry-run",
        "-d",
        help="Show what would be done without making changes",
    ),
    ci: bool = typer.Option(  # noqa: B008
        False,
        "--ci",
        help="Non-interactive: answer every prompt with its default",
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False,
        "--verbose",
        "-v",
        help="Echo every command and its output",
    ),
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file (default: search the project root)",
    ),
) -> None:
    """Release the project in the current directory.

    INCREMENT can be:
    - A bump type: major, minor, patch
    - An explicit version: 1.2.3

    Without it, you are asked for the increment (or patch is used with --ci).

    Examples:
        release-cycle release minor        # 1.0.0 -> 1.1.0
        release-cycle release 2.0.0        # Set specific version
        release-cycle release --ci         # Non-interactive patch release
        release-cycle release --dry-run    # Preview without changes
    """
    try:
        project_root = Path.cwd()
        cfg = load_config(
            config,
            project_root=project_root,
            overrides={
                "increment": increment,
                "dry_run": dry_run or None,
                "ci": ci or None,
                "verbose": verbose or None,
            },
        )

        log = ReleaseLog(console=console, verbose=cfg.verbose)
        if cfg.dry_run:
            console.print(Panel("[yellow]DRY RUN MODE[/yellow] - No changes will be made"))

        shell = ShellExecutor(log, cwd=project_root, dry_run=cfg.dry_run)
        prompter = None if cfg.ci else TerminalPrompter(console)
        runner = TaskRunner(
            config=cfg,
            log=log,
            shell=shell,
            prompter=prompter,
            project_root=project_root,
        )
        summary = runner.run()
        if cfg.verbose:
            display_summary(summary)

    except PluginError as e:
        if e.summary is not None:
            display_summary(e.summary)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=e.exit_code) from None
    except ReleaseError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=e.exit_code) from None


@app.command()
def hooks(
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file (default: search the project root)",
    ),
) -> None:
    """List configured hooks in the order a release would run them.

    Namespace hooks are shown for every known plugin, whether or not it
    would be enabled in this project.
    """
    try:
        cfg = load_config(config)
        resolver = HookResolver(cfg.hooks)
        namespaces = [plugin_class.namespace for plugin_class, _ in PluginRegistry.resolve(cfg)]
        rows = resolver.plan(namespaces)

        if not rows:
            console.print("[yellow]No hooks configured[/yellow]")
            return

        table = Table(title="Hooks")
        table.add_column("Event", style="cyan")
        table.add_column("Hook")
        table.add_column("Command")
        for event, key, command in rows:
            run = escape(command.run)
            if not command.fatal:
                run += " [dim](non-fatal)[/dim]"
            table.add_row(event.value, key, run)
        console.print(table)

    except ReleaseError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=e.exit_code) from None


if __name__ == "__main__":
    app()
