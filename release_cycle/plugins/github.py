"""GitHub Releases plugin (gh CLI)."""

from typing import ClassVar

from release_cycle.plugins.base import PluginRegistry
from release_cycle.plugins.forge import ForgePlugin


@PluginRegistry.register
class GitHubPlugin(ForgePlugin):
    """Creates a GitHub release for the pushed tag."""

    namespace: ClassVar[str] = "github"
    display_name: ClassVar[str] = "GitHub"
    cli: ClassVar[str] = "gh"
    login_hint: ClassVar[str] = "Run 'gh auth login' or set GH_TOKEN"

    def release_command(self, tag_name: str, release_name: str, notes: str) -> list[str]:
        cmd = ["gh", "release", "create", tag_name, "--title", release_name, "--notes", notes]
        if self.options.draft:
            cmd.append("--draft")
        if self.options.prerelease:
            cmd.append("--prerelease")
        repository = self.repository()
        if repository:
            cmd.extend(["--repo", repository])
        return cmd

    def release_url(self, tag_name: str) -> str:
        return f"https://github.com/{self.repository()}/releases/tag/{tag_name}"
