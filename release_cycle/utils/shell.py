"""Subprocess execution utilities.

Provides command execution with:
- ANSI escape code stripping (keeps version strings and tag names clean)
- Argument lists run without a shell, strings run through the system shell
- Timeout support
- Environment variable injection
"""

import os
import re
import shlex
import shutil
import subprocess
from pathlib import Path

from release_cycle.exceptions import ShellCommandError

# Regex pattern for ANSI escape sequences
# Matches: ESC[...m, ESC[...;...m, and other control sequences
ANSI_PATTERN = re.compile(
    r"\x1b\[[0-9;]*[a-zA-Z]|\x1b\][^\x07]*\x07|\x1b[PX^_][^\x1b]*\x1b\\"
)

# Additional pattern for control characters that might slip through
CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences and control characters from text.

    Args:
        text: Input text potentially containing ANSI codes

    Returns:
        Clean text with all ANSI sequences removed
    """
    if not text:
        return ""
    result = ANSI_PATTERN.sub("", text)
    result = CONTROL_CHARS_PATTERN.sub("", result)
    return result


def format_command(cmd: str | list[str]) -> str:
    """Render a command for logs and error messages."""
    return cmd if isinstance(cmd, str) else shlex.join(cmd)


def run(
    cmd: str | list[str],
    cwd: Path | None = None,
    check: bool = True,
    timeout: int = 300,
    env: dict[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Execute a command and capture its output.

    A string is handed to the system shell so that user hooks may use
    pipes and ``&&``. A list is executed directly with shell=False.

    Args:
        cmd: Command to execute (shell string or list of arguments)
        cwd: Working directory for the command
        check: Whether to raise ShellCommandError on non-zero exit
        timeout: Maximum execution time in seconds
        env: Additional environment variables

    Returns:
        CompletedProcess with ANSI-stripped stdout/stderr

    Raises:
        ShellCommandError: If command fails and check=True
        subprocess.TimeoutExpired: If command exceeds timeout
    """
    use_shell = isinstance(cmd, str)

    merged_env = {**os.environ}
    if env:
        merged_env.update(env)

    result = subprocess.run(
        cmd if use_shell else list(cmd),
        cwd=cwd,
        shell=use_shell,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=merged_env,
    )

    result.stdout = strip_ansi(result.stdout) if result.stdout else ""
    result.stderr = strip_ansi(result.stderr) if result.stderr else ""

    if check and result.returncode != 0:
        raise ShellCommandError(
            command=format_command(cmd),
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    return result


def is_command_available(cmd: str) -> bool:
    """Check if a command is available in PATH.

    Args:
        cmd: Command name to check

    Returns:
        True if command is available
    """
    return shutil.which(cmd) is not None
