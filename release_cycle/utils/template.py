"""Command template substitution.

Templates reference run-time values as ``${name}`` or ``${repo.owner}``.
Values are looked up by their full dotted name. An unknown name is a
configuration error; a known name without a value renders as an empty
string.
"""

import re
from collections.abc import Iterable, Mapping

from release_cycle.exceptions import ConfigurationError

PLACEHOLDER_PATTERN = re.compile(r"\$\{\s*([A-Za-z_][\w.]*)\s*\}")


def variables(template: str) -> list[str]:
    """List the variable names referenced by a template, in order."""
    return PLACEHOLDER_PATTERN.findall(template)


def check_variables(template: str, vocabulary: Iterable[str]) -> None:
    """Raise ConfigurationError if the template uses an unknown variable."""
    known = set(vocabulary)
    unknown = [name for name in variables(template) if name not in known]
    if unknown:
        raise ConfigurationError(
            f"Unknown variable(s) in command template: {', '.join(unknown)}",
            details=f"Template: {template}",
            fix_hint=f"Available variables: {', '.join(sorted(known))}",
        )


def render(template: str, values: Mapping[str, object]) -> str:
    """Substitute ``${...}`` placeholders from values.

    Args:
        template: Command template
        values: Flat mapping of dotted variable names to values

    Returns:
        The rendered command

    Raises:
        ConfigurationError: If a placeholder is not in values
    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in values:
            raise ConfigurationError(
                f"Unknown variable '{name}' in command template",
                details=f"Template: {template}",
                fix_hint=f"Available variables: {', '.join(sorted(values))}",
            )
        value = values[name]
        return "" if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(substitute, template)
