"""Command execution port used by the orchestrator and plugins.

ShellExecutor renders command templates against the run's values, echoes
commands through the logger and honours dry-run mode: commands that change
state (``write=True``, the default) are logged but not executed and report
success, while read-only queries still run.
"""

import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from release_cycle.exceptions import ShellCommandError
from release_cycle.log import ReleaseLog
from release_cycle.utils.shell import format_command, run
from release_cycle.utils.template import render


@dataclass(frozen=True)
class CommandResult:
    """Result of one command."""

    command: str
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandExecutor(Protocol):
    """What the orchestrator and plugins need from a command runner."""

    dry_run: bool

    def exec(
        self,
        command: str | list[str],
        values: Mapping[str, object] | None = None,
        *,
        write: bool = True,
        external: bool = False,
        check: bool = True,
    ) -> CommandResult: ...

    def exec_formatted_command(
        self, template: str, values: Mapping[str, object]
    ) -> CommandResult: ...


class ShellExecutor:
    """Runs one command at a time, synchronously.

    Args:
        log: Logger used to echo commands
        cwd: Working directory for every command
        dry_run: Skip commands that change state
        timeout: Per-command timeout in seconds
    """

    def __init__(
        self,
        log: ReleaseLog,
        cwd: Path | None = None,
        dry_run: bool = False,
        timeout: int = 300,
    ) -> None:
        self.log = log
        self.cwd = cwd
        self.dry_run = dry_run
        self.timeout = timeout

    def exec(
        self,
        command: str | list[str],
        values: Mapping[str, object] | None = None,
        *,
        write: bool = True,
        external: bool = False,
        check: bool = True,
    ) -> CommandResult:
        """Run a command.

        Args:
            command: Shell template string, or an argument list (not templated)
            values: Template values; required for strings with placeholders
            write: Whether the command changes state (skipped in dry run)
            external: Whether the command is a user hook (always echoed)
            check: Raise on non-zero exit

        Returns:
            CommandResult with stripped stdout/stderr

        Raises:
            ConfigurationError: If the template references an unknown variable
            ShellCommandError: If the command fails and check=True
        """
        if isinstance(command, str):
            prepared: str | list[str] = render(command, values or {})
        else:
            prepared = list(command)
        display = format_command(prepared)

        skip = self.dry_run and write
        self.log.exec(display, dry_run=skip, external=external)
        if skip:
            return CommandResult(command=display)

        completed = self._spawn(prepared)
        result = CommandResult(
            command=display,
            returncode=completed.returncode,
            stdout=(completed.stdout or "").strip(),
            stderr=(completed.stderr or "").strip(),
        )
        if check and not result.ok:
            raise ShellCommandError(
                command=display,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        if result.stdout:
            self.log.verbose(result.stdout)
        return result

    def exec_formatted_command(
        self, template: str, values: Mapping[str, object]
    ) -> CommandResult:
        """Render and run a user hook template."""
        return self.exec(template, values, external=True)

    def _spawn(self, command: str | list[str]) -> subprocess.CompletedProcess[str]:
        return run(command, cwd=self.cwd, check=False, timeout=self.timeout)
