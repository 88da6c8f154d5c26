"""Base class and registry for release-cycle plugins.

A plugin owns one namespace (``git``, ``npm``, ...) and implements some of
the lifecycle methods:

- init()
- before_bump()
- bump(version)
- before_release()
- release()
- after_release()

Which of these a plugin implements is declared up front in its
``lifecycle`` class attribute; the orchestrator checks that declaration
instead of probing for methods. A plugin signals failure by raising.
"""

import importlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from release_cycle.exceptions import ConfigurationError
from release_cycle.lifecycle import LifecycleEvent, RunContext
from release_cycle.log import ReleaseLog
from release_cycle.prompt import Prompter, PromptSpec
from release_cycle.shell import CommandExecutor
from release_cycle.utils.template import render

if TYPE_CHECKING:
    from release_cycle.config.models import ReleaseConfig


@dataclass
class PluginContext:
    """Everything a plugin may use during a run."""

    project_root: Path
    config: "ReleaseConfig"
    shell: CommandExecutor
    log: ReleaseLog
    run: RunContext
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class IncrementBase:
    """Input to version increment queries."""

    latest_version: str
    increment: str | None = None


class ReleasePlugin:
    """Base class for all release-cycle plugins.

    Subclasses set ``namespace``, ``display_name`` and ``lifecycle`` and
    implement the methods for the events they declare. Everything else has
    a neutral default.
    """

    namespace: ClassVar[str]
    display_name: ClassVar[str]
    lifecycle: ClassVar[frozenset[LifecycleEvent]] = frozenset()

    def __init__(self, context: PluginContext) -> None:
        self.context = context
        self.config = context.config
        self.shell = context.shell
        self.log = context.log

    @classmethod
    def is_enabled(cls, context: PluginContext) -> bool:
        """Whether this namespace takes part in the run at all.

        Evaluated once, before the first event.
        """
        return True

    def declares(self, event: LifecycleEvent) -> bool:
        return event in self.lifecycle

    def invoke(self, event: LifecycleEvent, version: str | None = None) -> None:
        """Call the lifecycle method for an event this plugin declares."""
        method = getattr(self, event.method_name)
        if event is LifecycleEvent.BUMP:
            method(version)
        else:
            method()

    def feature_enabled(self, event: LifecycleEvent) -> bool:
        """Static feature flag for a declared phase (e.g. ``npm.publish``)."""
        return True

    def confirmation(self, event: LifecycleEvent) -> PromptSpec | None:
        """Prompt guarding a declared phase, or None to run unprompted."""
        return None

    # Queries answered during version resolution; None means "no opinion".

    def get_name(self) -> str | None:
        return None

    def get_latest_version(self) -> str | None:
        return None

    def get_changelog(self, latest_version: str) -> str | None:
        return None

    def get_incremented_version_ci(self, base: IncrementBase) -> str | None:
        return None

    def get_incremented_version(self, base: IncrementBase, prompter: Prompter) -> str | None:
        return None

    @property
    def values(self) -> dict[str, object]:
        """Template values of the current run."""
        return self.context.run.values

    def templates(self) -> dict[str, str]:
        """Configuration templates this plugin renders, by option name.

        Checked against the template vocabulary before the first event.
        """
        return {}

    def format(self, template: str) -> str:
        """Render a configuration template against the run's values."""
        return render(template, self.values)


def validate_plugin_class(plugin_class: type) -> None:
    """Check a plugin class satisfies the plugin contract.

    Raises:
        TypeError: If the class is not a valid plugin
    """
    if not isinstance(plugin_class, type) or not issubclass(plugin_class, ReleasePlugin):
        raise TypeError(f"{plugin_class!r} is not a ReleasePlugin subclass")

    required_attrs = ["namespace", "display_name"]
    missing = [attr for attr in required_attrs if not hasattr(plugin_class, attr)]
    if missing:
        raise TypeError(
            f"Plugin class {plugin_class.__name__} missing required "
            f"class attributes: {', '.join(missing)}. "
            "All plugins must define 'namespace' and 'display_name'."
        )

    namespace = plugin_class.namespace
    if not isinstance(namespace, str) or not namespace:
        raise TypeError(
            f"Plugin {plugin_class.__name__}.namespace must be a non-empty string, "
            f"got {type(namespace).__name__}: {namespace!r}"
        )

    for event in plugin_class.lifecycle:
        if not isinstance(event, LifecycleEvent):
            raise TypeError(
                f"Plugin {plugin_class.__name__}.lifecycle must contain LifecycleEvent members, "
                f"got {event!r}"
            )
        if not callable(getattr(plugin_class, event.method_name, None)):
            raise TypeError(
                f"Plugin {plugin_class.__name__} declares '{event.value}' "
                f"but does not define {event.method_name}()"
            )


class PluginRegistry:
    """Registry for plugin implementations.

    Built-in plugins register themselves on import; the registration order
    is the order in which namespaces run.
    """

    _plugins: dict[str, type[ReleasePlugin]] = {}

    @classmethod
    def register(cls, plugin_class: type[ReleasePlugin]) -> type[ReleasePlugin]:
        """Register a plugin class.

        Can be used as a decorator:
            @PluginRegistry.register
            class GitPlugin(ReleasePlugin):
                ...

        Raises:
            TypeError: If plugin_class does not satisfy the plugin contract
            ValueError: If another class already owns the namespace
        """
        validate_plugin_class(plugin_class)

        namespace = plugin_class.namespace
        if namespace in cls._plugins:
            existing = cls._plugins[namespace]
            if existing is not plugin_class:
                raise ValueError(
                    f"Plugin namespace '{namespace}' already registered by {existing.__name__}. "
                    f"Cannot register {plugin_class.__name__}."
                )
            return plugin_class

        cls._plugins[namespace] = plugin_class
        return plugin_class

    @classmethod
    def get(cls, namespace: str) -> type[ReleasePlugin] | None:
        return cls._plugins.get(namespace)

    @classmethod
    def list_registered(cls) -> list[str]:
        return list(cls._plugins.keys())

    @classmethod
    def builtins(cls) -> list[type[ReleasePlugin]]:
        return list(cls._plugins.values())

    @staticmethod
    def load(import_path: str) -> type[ReleasePlugin]:
        """Import a user plugin from a ``module:Class`` path.

        Raises:
            ConfigurationError: If the path cannot be imported or is not a plugin
        """
        module_name, _, attr = import_path.partition(":")
        if not module_name or not attr:
            raise ConfigurationError(
                f"Invalid plugin path '{import_path}'",
                fix_hint="Use the form 'package.module:ClassName'",
            )
        try:
            module = importlib.import_module(module_name)
            plugin_class = getattr(module, attr)
        except (ImportError, AttributeError) as e:
            raise ConfigurationError(
                f"Cannot load plugin '{import_path}'",
                details=str(e),
                fix_hint="Check the plugin is installed and the path is correct",
            ) from e
        try:
            validate_plugin_class(plugin_class)
        except TypeError as e:
            raise ConfigurationError(f"Invalid plugin '{import_path}'", details=str(e)) from e
        return plugin_class

    @classmethod
    def resolve(
        cls, config: "ReleaseConfig"
    ) -> list[tuple[type[ReleasePlugin], dict[str, Any]]]:
        """Built-in plugins followed by the user plugins named in config.

        Returns:
            (plugin class, options) pairs in run order

        Raises:
            ConfigurationError: If a user plugin cannot be loaded or clashes
                with another namespace
        """
        resolved: list[tuple[type[ReleasePlugin], dict[str, Any]]] = [
            (plugin_class, {}) for plugin_class in cls.builtins()
        ]
        taken = {plugin_class.namespace for plugin_class, _ in resolved}
        for import_path, options in config.plugins.items():
            plugin_class = cls.load(import_path)
            if plugin_class.namespace in taken:
                raise ConfigurationError(
                    f"Plugin '{import_path}' uses namespace '{plugin_class.namespace}', "
                    "which is already taken"
                )
            taken.add(plugin_class.namespace)
            resolved.append((plugin_class, dict(options or {})))
        return resolved
