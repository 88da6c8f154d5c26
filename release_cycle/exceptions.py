"""Custom exception hierarchy for release-cycle.

Exit codes follow Unix conventions:
- 1: General error
- 2: Configuration error
- 3: Validation error
- 4: Git error
- 5: Plugin error
- 6: Shell command error
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from release_cycle.lifecycle import LifecycleEvent, ReleaseSummary


class ReleaseError(Exception):
    """Base exception for all release errors.

    All release-related exceptions inherit from this class.
    Each subclass defines an exit_code for CLI error reporting.
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Brief error message
            details: Detailed explanation of what went wrong
            fix_hint: Suggested command or action to fix the issue
        """
        super().__init__(message)
        self.message = message
        self.details = details
        self.fix_hint = fix_hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"\nDetails: {self.details}")
        if self.fix_hint:
            parts.append(f"\nFix: {self.fix_hint}")
        return "".join(parts)


class ConfigurationError(ReleaseError):
    """Configuration errors.

    Raised when:
    - Config file has invalid syntax (YAML/TOML)
    - Config values fail validation
    - A hook key is malformed
    - A command template references an unknown variable
    """

    exit_code = 2


class ValidationError(ReleaseError):
    """Pre-release precondition failures.

    Raised when:
    - Git working directory is dirty
    - Registry or forge authentication is missing
    - Version format is invalid
    """

    exit_code = 3


class GitError(ReleaseError):
    """Git operation failures."""

    exit_code = 4


class PluginError(ReleaseError):
    """A release-cycle phase failed and the run was aborted.

    Attributes:
        event: Lifecycle event that was running
        namespace: Plugin namespace that failed (None for global hooks)
        summary: What completed before the failure
    """

    exit_code = 5

    def __init__(
        self,
        message: str,
        event: "LifecycleEvent",
        namespace: str | None = None,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        super().__init__(message, details=details, fix_hint=fix_hint)
        self.event = event
        self.namespace = namespace
        self.summary: ReleaseSummary | None = None


class ShellCommandError(ReleaseError):
    """A shell command exited with a non-zero status.

    Attributes:
        command: The command that failed
        returncode: Exit code of the failed command
        stdout: Standard output (ANSI stripped)
        stderr: Standard error (ANSI stripped)
    """

    exit_code = 6

    def __init__(
        self,
        command: str,
        returncode: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(
            f"Command failed with exit code {returncode}: {command}",
            details=stderr or stdout or None,
        )
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
