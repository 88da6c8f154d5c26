"""GitLab Releases plugin (glab CLI)."""

from typing import ClassVar

from release_cycle.plugins.base import PluginRegistry
from release_cycle.plugins.forge import ForgePlugin
from release_cycle.plugins.git import parse_remote_url


@PluginRegistry.register
class GitLabPlugin(ForgePlugin):
    """Creates a GitLab release for the pushed tag."""

    namespace: ClassVar[str] = "gitlab"
    display_name: ClassVar[str] = "GitLab"
    cli: ClassVar[str] = "glab"
    login_hint: ClassVar[str] = "Run 'glab auth login' or set GITLAB_TOKEN"

    def release_command(self, tag_name: str, release_name: str, notes: str) -> list[str]:
        cmd = ["glab", "release", "create", tag_name, "--name", release_name, "--notes", notes]
        repository = self.repository()
        if repository:
            cmd.extend(["--repo", repository])
        return cmd

    def release_url(self, tag_name: str) -> str:
        if self.options.push_repo:
            host = parse_remote_url(self.options.push_repo)["repo.host"]
        else:
            host = str(self.values.get("repo.host") or "")
        return f"https://{host or 'gitlab.com'}/{self.repository()}/-/releases/{tag_name}"
