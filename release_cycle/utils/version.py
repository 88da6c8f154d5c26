"""Semantic version parsing and increment utilities.

Versions follow MAJOR.MINOR.PATCH. Tags may carry a leading 'v' which is
dropped on normalization.
"""

import re
from typing import Literal

from release_cycle.exceptions import ValidationError

Increment = Literal["major", "minor", "patch"]
VersionTuple = tuple[int, int, int]

INCREMENTS: tuple[Increment, ...] = ("patch", "minor", "major")

# Semantic version pattern: MAJOR.MINOR.PATCH (with optional leading 'v')
SEMVER_PATTERN = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)$")


def parse_version(version_str: str) -> VersionTuple:
    """Parse a semantic version string into a tuple of integers.

    Args:
        version_str: Version string to parse (e.g., '1.2.3', 'v1.2.3')

    Returns:
        Tuple of (major, minor, patch)

    Raises:
        ValidationError: If the string is not a semantic version

    Examples:
        >>> parse_version('v1.2.3')
        (1, 2, 3)
    """
    match = SEMVER_PATTERN.match((version_str or "").strip())
    if not match:
        raise ValidationError(
            f"Invalid version format: '{version_str}'",
            details="Version must follow semantic versioning: MAJOR.MINOR.PATCH",
            fix_hint="Use format like '1.2.3' or 'v1.2.3'",
        )
    major, minor, patch = (int(part) for part in match.groups())
    return (major, minor, patch)


def is_valid_version(version_str: str | None) -> bool:
    """Check if a string is a semantic version (optional 'v' prefix)."""
    if not version_str:
        return False
    return SEMVER_PATTERN.match(version_str.strip()) is not None


def normalize_version(version_str: str) -> str:
    """Drop prefix and whitespace: ' v1.2.3 ' -> '1.2.3'."""
    major, minor, patch = parse_version(version_str)
    return f"{major}.{minor}.{patch}"


def increment_version(latest: str, increment: Increment | str) -> str:
    """Compute the next version from the latest one.

    Args:
        latest: Latest released version (e.g., '1.2.3')
        increment: 'major', 'minor', 'patch' or an explicit version

    Returns:
        New version string without prefix

    Raises:
        ValidationError: If latest or increment is invalid

    Examples:
        >>> increment_version('1.2.3', 'minor')
        '1.3.0'
        >>> increment_version('1.2.3', 'v2.0.0')
        '2.0.0'
    """
    if increment not in INCREMENTS:
        if is_valid_version(increment):
            return normalize_version(increment)
        raise ValidationError(
            f"Invalid increment or version: '{increment}'",
            details="Increment must be 'major', 'minor', 'patch', or a valid version string",
            fix_hint="Use 'major', 'minor', 'patch', or a version like '2.0.0'",
        )

    major, minor, patch = parse_version(latest)
    if increment == "major":
        return f"{major + 1}.0.0"
    if increment == "minor":
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch + 1}"
