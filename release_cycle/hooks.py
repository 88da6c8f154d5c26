"""Hook key parsing and resolution.

Hooks are user-configured shell command templates bound to keys of the form
``{prefix}:{event}`` (global) or ``{prefix}:{namespace}:{event}`` (scoped),
e.g. ``before:init`` or ``after:git:release``.

Ordering follows a nested-scope model:
- "before": the global hook runs first, then scoped hooks
- "after": scoped hooks run first, then the global hook

Within one key, commands run in the order they are listed.
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict

from release_cycle.exceptions import ConfigurationError
from release_cycle.lifecycle import LIFECYCLE, HookPrefix, LifecycleEvent
from release_cycle.utils.template import check_variables

NAMESPACE_PATTERN = re.compile(r"^[A-Za-z_][\w-]*$")


class HookCommand(BaseModel):
    """One hook command.

    Attributes:
        run: Command template
        fatal: Whether a non-zero exit aborts the release
    """

    model_config = ConfigDict(frozen=True)

    run: str
    fatal: bool = True


class HookKey(NamedTuple):
    prefix: HookPrefix
    event: LifecycleEvent
    namespace: str | None = None


def hook_key(prefix: HookPrefix, event: LifecycleEvent, namespace: str | None = None) -> str:
    """Build the configuration key for a hook."""
    if namespace is None:
        return f"{prefix.value}:{event.value}"
    return f"{prefix.value}:{namespace}:{event.value}"


def parse_hook_key(key: str) -> HookKey:
    """Parse a hook key into its parts.

    Raises:
        ValueError: If the key is malformed
    """
    parts = key.split(":")
    if len(parts) not in (2, 3):
        raise ValueError(
            f"Malformed hook key '{key}' (expected 'prefix:event' or 'prefix:namespace:event')"
        )

    try:
        prefix = HookPrefix(parts[0])
    except ValueError:
        raise ValueError(f"Malformed hook key '{key}': prefix must be 'before' or 'after'") from None

    event = LifecycleEvent.from_key(parts[-1])

    namespace = parts[1] if len(parts) == 3 else None
    if namespace is not None and not NAMESPACE_PATTERN.match(namespace):
        raise ValueError(f"Malformed hook key '{key}': invalid namespace '{namespace}'")

    return HookKey(prefix, event, namespace)


def normalize_commands(value: object) -> list[HookCommand]:
    """Coerce a hook value (string, mapping or list of either) to commands."""
    items = value if isinstance(value, (list, tuple)) else [value]
    commands = []
    for item in items:
        if isinstance(item, HookCommand):
            commands.append(item)
        elif isinstance(item, str):
            commands.append(HookCommand(run=item))
        elif isinstance(item, Mapping):
            commands.append(HookCommand(**item))
        else:
            raise ValueError(f"Invalid hook command: {item!r}")
    return commands


class HookResolver:
    """Resolves the hook commands to run around a lifecycle phase.

    A snapshot of the hook map is taken at construction; resolution is a pure
    function of that snapshot and the (prefix, event, namespace) asked for.
    Missing keys contribute nothing.
    """

    def __init__(self, hooks: Mapping[str, Sequence[HookCommand | str] | str] | None = None) -> None:
        self._hooks: dict[HookKey, tuple[HookCommand, ...]] = {}
        for key, value in (hooks or {}).items():
            try:
                parsed = parse_hook_key(key)
                commands = normalize_commands(value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid hook configuration for '{key}'",
                    details=str(e),
                    fix_hint="Use keys like 'before:init' or 'after:git:release'",
                ) from e
            self._hooks[parsed] = self._hooks.get(parsed, ()) + tuple(commands)

    def __bool__(self) -> bool:
        return bool(self._hooks)

    def keys(self) -> list[str]:
        return [hook_key(*key) for key in self._hooks]

    def global_hooks(self, prefix: HookPrefix, event: LifecycleEvent) -> list[HookCommand]:
        return list(self._hooks.get(HookKey(prefix, event), ()))

    def scoped_hooks(
        self, prefix: HookPrefix, event: LifecycleEvent, namespace: str
    ) -> list[HookCommand]:
        return list(self._hooks.get(HookKey(prefix, event, namespace), ()))

    def resolve(
        self,
        prefix: HookPrefix,
        event: LifecycleEvent,
        namespace: str | None = None,
    ) -> list[HookCommand]:
        """Return the ordered hook commands around one namespace's phase.

        Without a namespace this is the global hook alone, which the
        TaskRunner issues once per event. With a namespace it is the
        combined view of that namespace considered on its own (global
        before, scoped before; scoped after, global after). A run over
        several namespaces interleaves the scoped parts instead; see plan().

        Args:
            prefix: before or after
            event: Lifecycle event
            namespace: Plugin namespace, or None for the global hook only

        Returns:
            Global and scoped commands in nested-scope order
        """
        global_commands = self.global_hooks(prefix, event)
        if namespace is None:
            return global_commands
        scoped = self.scoped_hooks(prefix, event, namespace)
        if prefix is HookPrefix.BEFORE:
            return global_commands + scoped
        return scoped + global_commands

    def validate(self, vocabulary: Iterable[str]) -> None:
        """Check every template against the substitution vocabulary.

        Raises:
            ConfigurationError: On the first template with an unknown variable
        """
        known = tuple(vocabulary)
        for key, commands in self._hooks.items():
            for command in commands:
                try:
                    check_variables(command.run, known)
                except ConfigurationError as e:
                    e.message = f"Hook '{hook_key(*key)}': {e.message}"
                    raise

    def plan(
        self, namespaces: Sequence[str]
    ) -> list[tuple[LifecycleEvent, str, HookCommand]]:
        """List every hook a run over these namespaces may issue, in order.

        Scoped hooks wrap each namespace's phase, so a namespace's "after"
        hook comes before the next namespace's "before" hook.

        Returns:
            (event, hook key, command) tuples
        """
        rows = []
        for event in LIFECYCLE:
            steps: list[tuple[HookPrefix, str | None]] = [(HookPrefix.BEFORE, None)]
            for namespace in namespaces:
                steps.append((HookPrefix.BEFORE, namespace))
                steps.append((HookPrefix.AFTER, namespace))
            steps.append((HookPrefix.AFTER, None))
            for prefix, namespace in steps:
                commands = (
                    self.resolve(prefix, event)
                    if namespace is None
                    else self.scoped_hooks(prefix, event, namespace)
                )
                for command in commands:
                    rows.append((event, hook_key(prefix, event, namespace), command))
        return rows
