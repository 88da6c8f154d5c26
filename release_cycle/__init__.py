"""Hook-driven release lifecycle for git, GitHub, GitLab and npm."""

__version__ = "0.1.0"

from release_cycle.exceptions import (
    ConfigurationError,
    GitError,
    PluginError,
    ReleaseError,
    ShellCommandError,
    ValidationError,
)

__all__ = [
    "__version__",
    "ReleaseError",
    "ConfigurationError",
    "ValidationError",
    "GitError",
    "PluginError",
    "ShellCommandError",
]
