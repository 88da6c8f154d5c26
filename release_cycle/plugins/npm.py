"""npm plugin: bump package.json and publish to the registry.

- init: reads package.json and, unless ``skip_checks``, verifies the
  registry login with ``npm whoami``
- bump: ``npm version <version> --no-git-tag-version`` (the git plugin
  commits and tags)
- release: ``npm publish`` (feature flag ``npm.publish``)
"""

import json
from pathlib import Path
from typing import Any, ClassVar

from release_cycle.config.models import NPMConfig
from release_cycle.exceptions import ShellCommandError, ValidationError
from release_cycle.lifecycle import LifecycleEvent
from release_cycle.plugins.base import PluginContext, PluginRegistry, ReleasePlugin
from release_cycle.prompt import PromptSpec
from release_cycle.utils.version import is_valid_version, normalize_version


def get_package_json(project_root: Path) -> dict[str, Any] | None:
    """Parse package.json from project root.

    Returns:
        Parsed package.json dict, or None if not found or invalid
    """
    package_json_path = project_root / "package.json"
    if not package_json_path.exists():
        return None

    try:
        with open(package_json_path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return None
    return data if isinstance(data, dict) else None


@PluginRegistry.register
class NPMPlugin(ReleasePlugin):
    """Bumps and publishes an npm package."""

    namespace: ClassVar[str] = "npm"
    display_name: ClassVar[str] = "npm"
    lifecycle: ClassVar[frozenset[LifecycleEvent]] = frozenset(
        {LifecycleEvent.INIT, LifecycleEvent.BUMP, LifecycleEvent.RELEASE}
    )

    @classmethod
    def is_enabled(cls, context: PluginContext) -> bool:
        return context.config.npm.enabled and (context.project_root / "package.json").exists()

    def __init__(self, context: PluginContext) -> None:
        super().__init__(context)
        self.package = get_package_json(context.project_root) or {}

    @property
    def options(self) -> NPMConfig:
        return self.config.npm

    @property
    def package_name(self) -> str:
        return str(self.package.get("name") or "")

    def init(self) -> None:
        self.context.run.update({"npm.name": self.package_name, "npm.tag": self.options.tag})

        if not self.feature_enabled(LifecycleEvent.RELEASE) or self.options.skip_checks:
            return
        try:
            self.shell.exec(["npm", "whoami"], write=False)
        except ShellCommandError as e:
            raise ValidationError(
                "Not authenticated with the npm registry",
                details=e.stderr or e.stdout,
                fix_hint="Run 'npm login', or set npm.skip_checks to true",
            ) from e

    def get_name(self) -> str | None:
        return self.package_name or None

    def get_latest_version(self) -> str | None:
        if self.options.ignore_version:
            return None
        version = str(self.package.get("version") or "")
        if is_valid_version(version):
            return normalize_version(version)
        if version:
            self.log.warn(f"npm: ignoring unsupported package.json version '{version}'")
        return None

    def feature_enabled(self, event: LifecycleEvent) -> bool:
        if event is LifecycleEvent.BUMP:
            return not self.options.ignore_version
        if event is LifecycleEvent.RELEASE:
            return self.options.publish and not self.package.get("private", False)
        return True

    def confirmation(self, event: LifecycleEvent) -> PromptSpec | None:
        if event is LifecycleEvent.RELEASE:
            return PromptSpec("publish", f"Publish {self.package_name} to npm?")
        return None

    def bump(self, version: str | None) -> None:
        self.shell.exec(["npm", "version", str(version), "--no-git-tag-version"])

    def release(self) -> None:
        cmd = ["npm", "publish", self.options.publish_path, "--tag", self.options.tag]
        if self.options.access:
            cmd.extend(["--access", self.options.access])
        self.shell.exec(cmd)
        self.log.info(f"npm: https://www.npmjs.com/package/{self.package_name}")
