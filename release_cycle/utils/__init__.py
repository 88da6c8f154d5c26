"""Utility modules for release-cycle."""

from release_cycle.utils.shell import format_command, is_command_available, run, strip_ansi
from release_cycle.utils.template import check_variables, render, variables
from release_cycle.utils.version import (
    INCREMENTS,
    SEMVER_PATTERN,
    Increment,
    VersionTuple,
    increment_version,
    is_valid_version,
    normalize_version,
    parse_version,
)

__all__ = [
    # Shell utilities
    "run",
    "strip_ansi",
    "format_command",
    "is_command_available",
    # Template utilities
    "render",
    "variables",
    "check_variables",
    # Version utilities
    "parse_version",
    "is_valid_version",
    "normalize_version",
    "increment_version",
    "Increment",
    "VersionTuple",
    "INCREMENTS",
    "SEMVER_PATTERN",
]
