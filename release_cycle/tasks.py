"""Release orchestration.

Drives every enabled plugin through the fixed lifecycle:

1. init
2. (version resolution: name, latest version, changelog, next version)
3. beforeBump
4. bump
5. beforeRelease
6. release
7. afterRelease

For each event the global "before" hook runs once. Each namespace's phase
is then wrapped by its own "before"/"after" hooks, and the global "after"
hook runs once at the end. A namespace's "after" hook fires only when its
phase was executed; it is left out when the phase was skipped by a feature
flag or cancelled by the operator.
"""

from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any, TypeVar

from release_cycle.config.models import ReleaseConfig
from release_cycle.exceptions import (
    ConfigurationError,
    PluginError,
    ReleaseError,
    ShellCommandError,
)
from release_cycle.gate import ConfirmationGate
from release_cycle.hooks import HookResolver, hook_key
from release_cycle.lifecycle import (
    LIFECYCLE,
    TEMPLATE_VARIABLES,
    HookPrefix,
    LifecycleEvent,
    PhaseOutcome,
    PhaseResult,
    ReleaseSummary,
    RunContext,
)
from release_cycle.log import ReleaseLog
from release_cycle.plugins import IncrementBase, PluginContext, PluginRegistry, ReleasePlugin
from release_cycle.prompt import Prompter, TerminalPrompter
from release_cycle.shell import CommandExecutor, ShellExecutor
from release_cycle.utils.template import check_variables

T = TypeVar("T")

PluginSpec = type[ReleasePlugin] | tuple[type[ReleasePlugin], dict[str, Any]]


def first(candidates: Iterable[Callable[[], T | None]]) -> T | None:
    """Return the first truthy answer, without asking the rest."""
    for candidate in candidates:
        answer = candidate()
        if answer:
            return answer
    return None


class TaskRunner:
    """Runs one release.

    Args:
        config: Release configuration
        log: Logger collaborator
        shell: Command execution port
        prompter: Confirmation port; None means non-interactive
        project_root: Directory being released (defaults to cwd)
        plugins: Plugin classes, optionally paired with options, in run
            order. Defaults to the built-in plugins plus the user plugins
            named in config.
    """

    def __init__(
        self,
        config: ReleaseConfig,
        log: ReleaseLog,
        shell: CommandExecutor,
        prompter: Prompter | None = None,
        project_root: Path | None = None,
        plugins: Sequence[PluginSpec] | None = None,
    ) -> None:
        self.config = config
        self.log = log
        self.shell = shell
        self.prompter = prompter
        self.project_root = project_root or Path.cwd()
        self.plugin_specs = list(plugins) if plugins is not None else PluginRegistry.resolve(config)
        self.gate = ConfirmationGate(log, prompter=prompter, ci=config.ci)

    def run(self) -> ReleaseSummary:
        """Execute the release.

        Returns:
            Summary of the completed run

        Raises:
            ConfigurationError: If a hook or plugin template is invalid (before
                any phase)
            PluginError: If a phase, a fatal hook or version resolution
                failed; ``summary`` holds what completed
        """
        hooks = HookResolver(self.config.hooks)
        hooks.validate(TEMPLATE_VARIABLES)

        context = RunContext(hooks=hooks)
        plugins = self._create_plugins(context)
        context.namespaces = tuple(plugin.namespace for plugin in plugins)
        self._check_templates(plugins)
        self.log.verbose(f"Namespaces: {', '.join(context.namespaces) or '(none)'}")

        try:
            self._run_event(context, plugins, LifecycleEvent.INIT)
            version = self._resolve_version_or_fail(context, plugins)
            for event in LIFECYCLE[1:]:
                self._run_event(context, plugins, event, version)
        except PluginError as e:
            failed = context.results[-1] if context.results else None
            if failed is None or failed.outcome is not PhaseOutcome.FAILED:
                failed = PhaseResult(e.event, e.namespace or "", PhaseOutcome.FAILED, e.message)
            e.summary = context.summary(failed=failed)
            self.log.error(e.message)
            raise

        self.log.log(f"Done (in {int(context.elapsed)}s.)")
        return context.summary()

    def _create_plugins(self, context: RunContext) -> list[ReleasePlugin]:
        plugins = []
        for spec in self.plugin_specs:
            plugin_class, options = spec if isinstance(spec, tuple) else (spec, {})
            plugin_context = PluginContext(
                project_root=self.project_root,
                config=self.config,
                shell=self.shell,
                log=self.log,
                run=context,
                options=options,
            )
            if plugin_class.is_enabled(plugin_context):
                plugins.append(plugin_class(plugin_context))
            else:
                self.log.verbose(f"{plugin_class.display_name}: disabled")
        return plugins

    def _check_templates(self, plugins: list[ReleasePlugin]) -> None:
        for plugin in plugins:
            for option, template in plugin.templates().items():
                try:
                    check_variables(template, TEMPLATE_VARIABLES)
                except ConfigurationError as e:
                    e.message = f"Option '{option}': {e.message}"
                    raise

    def _resolve_version_or_fail(self, context: RunContext, plugins: list[ReleasePlugin]) -> str:
        try:
            return self._resolve_version(context, plugins)
        except Exception as e:
            raise PluginError(
                "Could not resolve the version to release",
                event=LifecycleEvent.INIT,
                details=str(e),
                fix_hint=getattr(e, "fix_hint", None),
            ) from e

    def _resolve_version(self, context: RunContext, plugins: list[ReleasePlugin]) -> str:
        """Resolve name, latest version, changelog and the next version.

        Plugins are consulted in reverse registration order so that package
        metadata takes precedence over repository metadata.
        """
        queries = list(reversed(plugins))

        name = first(plugin.get_name for plugin in queries) or self.project_root.name
        latest_version = first(plugin.get_latest_version for plugin in queries) or "0.0.0"
        changelog = first(
            (lambda plugin=plugin: plugin.get_changelog(latest_version)) for plugin in queries
        ) or ""
        context.update({"name": name, "latestVersion": latest_version, "changelog": changelog})

        self.log.obtrusive(f"Let's release {name} (currently at {latest_version})")
        self.log.preview("changelog", changelog)

        base = IncrementBase(latest_version=latest_version, increment=self.config.increment)
        if self.gate.ci or self.prompter is None:
            version = first(
                (lambda plugin=plugin: plugin.get_incremented_version_ci(base)) for plugin in queries
            )
        else:
            prompter = self.prompter
            version = first(
                (lambda plugin=plugin: plugin.get_incremented_version(base, prompter))
                for plugin in queries
            )

        if not version:
            raise ReleaseError(
                f"No new version to release for {name}",
                fix_hint="Pass an increment (major, minor, patch) or an explicit version",
            )
        context.update({"version": version})
        self.log.info(f"Version: {latest_version} -> {version}")
        return version

    def _run_event(
        self,
        context: RunContext,
        plugins: list[ReleasePlugin],
        event: LifecycleEvent,
        version: str | None = None,
    ) -> None:
        self._run_hooks(context, HookPrefix.BEFORE, event)
        for plugin in plugins:
            self._run_hooks(context, HookPrefix.BEFORE, event, plugin.namespace)
            outcome = self._run_phase(context, plugin, event, version)
            if outcome is PhaseOutcome.EXECUTED:
                self._run_hooks(context, HookPrefix.AFTER, event, plugin.namespace)
        self._run_hooks(context, HookPrefix.AFTER, event)

    def _run_phase(
        self,
        context: RunContext,
        plugin: ReleasePlugin,
        event: LifecycleEvent,
        version: str | None,
    ) -> PhaseOutcome:
        namespace = plugin.namespace

        if not plugin.declares(event):
            # Nothing to do; only a declined dependency keeps the hooks quiet.
            outcome = (
                PhaseOutcome.CANCELLED
                if context.is_blocked(namespace, event)
                else PhaseOutcome.EXECUTED
            )
            context.record(event, namespace, outcome)
            return outcome

        if not plugin.feature_enabled(event):
            self.log.verbose(f"{plugin.display_name}: {event.value} disabled")
            context.record(event, namespace, PhaseOutcome.SKIPPED)
            return PhaseOutcome.SKIPPED

        try:
            outcome = self.gate.run(
                context,
                namespace,
                event,
                plugin.confirmation(event),
                lambda: plugin.invoke(event, version),
            )
        except Exception as e:
            context.record(event, namespace, PhaseOutcome.FAILED, str(e))
            raise PluginError(
                f"{plugin.display_name} failed during {event.value}",
                event=event,
                namespace=namespace,
                details=str(e),
                fix_hint=getattr(e, "fix_hint", None),
            ) from e

        context.record(event, namespace, outcome)
        return outcome

    def _run_hooks(
        self,
        context: RunContext,
        prefix: HookPrefix,
        event: LifecycleEvent,
        namespace: str | None = None,
    ) -> None:
        if namespace is None:
            commands = context.hooks.resolve(prefix, event)
        else:
            commands = context.hooks.scoped_hooks(prefix, event, namespace)

        for command in commands:
            try:
                self.shell.exec_formatted_command(command.run, context.values)
            except ShellCommandError as e:
                key = hook_key(prefix, event, namespace)
                if not command.fatal:
                    self.log.warn(f"Hook '{key}' failed (ignored): {e.message}")
                    continue
                raise PluginError(
                    f"Hook '{key}' failed",
                    event=event,
                    namespace=namespace,
                    details=str(e),
                ) from e


def run_tasks(
    config: ReleaseConfig,
    project_root: Path | None = None,
    log: ReleaseLog | None = None,
    shell: CommandExecutor | None = None,
    prompter: Prompter | None = None,
) -> ReleaseSummary:
    """Run a release with default collaborators.

    This is the main entry point for running a release.

    Args:
        config: Release configuration
        project_root: Path to the project (defaults to cwd)
        log: Logger (defaults to a rich console logger)
        shell: Command executor (defaults to ShellExecutor)
        prompter: Prompter (defaults to the terminal unless config.ci)

    Returns:
        Summary of the completed run
    """
    project_root = project_root or Path.cwd()
    log = log or ReleaseLog(verbose=config.verbose)
    if shell is None:
        shell = ShellExecutor(log, cwd=project_root, dry_run=config.dry_run)
    if prompter is None and not config.ci:
        prompter = TerminalPrompter(log.console)

    runner = TaskRunner(
        config=config,
        log=log,
        shell=shell,
        prompter=prompter,
        project_root=project_root,
    )
    return runner.run()
