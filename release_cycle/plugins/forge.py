"""Shared behaviour of hosted-forge release plugins (GitHub, GitLab).

Both shell out to the forge's CLI (``gh`` / ``glab``), which handles
authentication; the release is created for the tag produced by the git
plugin, titled from ``release_name`` and described by the changelog.
"""

from typing import ClassVar

from release_cycle.config.models import ForgeConfig
from release_cycle.exceptions import ShellCommandError, ValidationError
from release_cycle.lifecycle import LifecycleEvent
from release_cycle.plugins.base import PluginContext, ReleasePlugin
from release_cycle.plugins.git import parse_remote_url
from release_cycle.prompt import PromptSpec
from release_cycle.utils.shell import is_command_available


class ForgePlugin(ReleasePlugin):
    """Base for plugins that create a release on a hosted forge."""

    cli: ClassVar[str]
    login_hint: ClassVar[str]
    lifecycle: ClassVar[frozenset[LifecycleEvent]] = frozenset(
        {LifecycleEvent.INIT, LifecycleEvent.RELEASE}
    )

    @classmethod
    def is_enabled(cls, context: PluginContext) -> bool:
        section = context.config.section(cls.namespace)
        return bool(section and section.enabled)

    @property
    def options(self) -> ForgeConfig:
        section = self.config.section(self.namespace)
        if not isinstance(section, ForgeConfig):
            raise TypeError(f"No forge configuration for '{self.namespace}'")
        return section

    def templates(self) -> dict[str, str]:
        return {f"{self.namespace}.release_name": self.options.release_name}

    def repository(self) -> str:
        """owner/project slug, from ``push_repo`` or the git remote."""
        if self.options.push_repo:
            return parse_remote_url(self.options.push_repo)["repo.repository"]
        return str(self.values.get("repo.repository") or "")

    def init(self) -> None:
        if not self.options.release or self.options.skip_checks:
            return
        if not is_command_available(self.cli):
            raise ValidationError(
                f"{self.cli} CLI not installed",
                details=f"The {self.cli} CLI is required to create {self.display_name}",
                fix_hint=f"Install {self.cli}, or set {self.namespace}.release to false",
            )
        try:
            self.shell.exec([self.cli, "auth", "status"], write=False)
        except ShellCommandError as e:
            raise ValidationError(
                f"Not authenticated with {self.display_name}",
                details=e.stderr or e.stdout,
                fix_hint=self.login_hint,
            ) from e

    def feature_enabled(self, event: LifecycleEvent) -> bool:
        if event is LifecycleEvent.RELEASE:
            return self.options.release
        return True

    def confirmation(self, event: LifecycleEvent) -> PromptSpec | None:
        if event is LifecycleEvent.RELEASE:
            return PromptSpec(
                "release",
                f"Create a release on {self.display_name} ({self.format(self.options.release_name)})?",
            )
        return None

    def release_command(self, tag_name: str, release_name: str, notes: str) -> list[str]:
        raise NotImplementedError

    def release_url(self, tag_name: str) -> str:
        raise NotImplementedError

    def release(self) -> None:
        tag_name = str(self.values.get("tagName") or self.values.get("version") or "")
        release_name = self.format(self.options.release_name)
        notes = str(self.values.get("changelog") or "") or release_name

        result = self.shell.exec(self.release_command(tag_name, release_name, notes))

        url = result.stdout.splitlines()[-1] if result.stdout else ""
        if not url.startswith("http"):
            url = self.release_url(tag_name)
        self.context.run.update({"releaseUrl": url})
        self.log.info(f"{self.display_name}: {url}")
