"""Git plugin: commit, tag and push the release.

- init: checks the working directory and collects repository facts
  (remote, branch, latest tag, last commit subject) into the run's
  template values
- beforeBump: resolves the release tag name
- beforeRelease: commits the bumped files and creates the tag
- release: pushes commit and tag (feature flag ``git.push``)
"""

import re
from typing import ClassVar

from release_cycle.config.models import GitConfig
from release_cycle.exceptions import GitError, ShellCommandError, ValidationError
from release_cycle.lifecycle import LifecycleEvent
from release_cycle.plugins.base import PluginContext, PluginRegistry, ReleasePlugin
from release_cycle.prompt import PromptSpec
from release_cycle.utils.version import is_valid_version, normalize_version

# Matches:
# - https://github.com/owner/project.git
# - ssh://git@gitlab.com/group/owner/project.git
# - git@github.com:owner/project.git
URL_PATTERN = re.compile(
    r"^(?:(?P<protocol>[a-z+]+)://)?(?:[^@/]+@)?(?P<host>[^:/]+)[:/](?P<path>.+?)(?:\.git)?/?$"
)


def parse_remote_url(url: str) -> dict[str, str]:
    """Split a git remote URL into template values.

    Local paths (e.g. a bare repository on disk) have no host; owner and
    project are then the last two path components.

    Returns:
        Mapping of ``repo.*`` variable names to values
    """
    url = url.strip()
    values = {
        "repo.remote": url,
        "repo.protocol": "",
        "repo.host": "",
        "repo.owner": "",
        "repo.project": "",
        "repo.repository": "",
    }
    if not url:
        return values

    if url.startswith(("/", ".", "file://")):
        parts = [part for part in url.removeprefix("file://").rstrip("/").split("/") if part]
        project = parts[-1].removesuffix(".git") if parts else ""
        owner = parts[-2] if len(parts) > 1 else ""
        protocol = "file"
        host = ""
    else:
        match = URL_PATTERN.match(url)
        if not match:
            return values
        path = match.group("path").strip("/")
        owner, _, project = path.rpartition("/")
        protocol = match.group("protocol") or "ssh"
        host = match.group("host")

    values.update(
        {
            "repo.protocol": protocol,
            "repo.host": host,
            "repo.owner": owner,
            "repo.project": project,
            "repo.repository": f"{owner}/{project}" if owner else project,
        }
    )
    return values


@PluginRegistry.register
class GitPlugin(ReleasePlugin):
    """Commits, tags and pushes the release."""

    namespace: ClassVar[str] = "git"
    display_name: ClassVar[str] = "Git"
    lifecycle: ClassVar[frozenset[LifecycleEvent]] = frozenset(
        {
            LifecycleEvent.INIT,
            LifecycleEvent.BEFORE_BUMP,
            LifecycleEvent.BEFORE_RELEASE,
            LifecycleEvent.RELEASE,
        }
    )

    @classmethod
    def is_enabled(cls, context: PluginContext) -> bool:
        if not context.config.git.enabled:
            return False
        result = context.shell.exec(["git", "rev-parse", "--git-dir"], write=False, check=False)
        return result.ok

    @property
    def options(self) -> GitConfig:
        return self.config.git

    def templates(self) -> dict[str, str]:
        return {
            "git.tag_name": self.options.tag_name,
            "git.commit_message": self.options.commit_message,
            "git.tag_annotation": self.options.tag_annotation,
        }

    def _query(self, *args: str) -> str:
        """Run a read-only git command; empty string on failure."""
        result = self.shell.exec(["git", *args], write=False, check=False)
        return result.stdout if result.ok else ""

    def init(self) -> None:
        if self.options.require_clean_working_dir:
            status = self._query("status", "--porcelain", "--untracked-files=no")
            if status:
                raise ValidationError(
                    "Working directory is not clean",
                    details=status,
                    fix_hint="Commit or stash your changes ('git stash'), "
                    "or set git.require_clean_working_dir to false",
                )

        push_repo = self.options.push_repo
        remote_url = push_repo if "/" in push_repo or ":" in push_repo else self._query(
            "remote", "get-url", push_repo
        )

        self.context.run.update(parse_remote_url(remote_url))
        self.context.run.update(
            {
                "branchName": self._query("rev-parse", "--abbrev-ref", "HEAD"),
                "latestTag": self._query("describe", "--tags", "--abbrev=0"),
                "lastCommitMessage": self._query("log", "-1", "--format=%s"),
            }
        )

    def get_name(self) -> str | None:
        return str(self.values.get("repo.project") or "") or None

    def get_latest_version(self) -> str | None:
        latest_tag = str(self.values.get("latestTag") or "")
        if is_valid_version(latest_tag):
            return normalize_version(latest_tag)
        return None

    def get_changelog(self, latest_version: str) -> str | None:
        latest_tag = str(self.values.get("latestTag") or "")
        revision_range = f"{latest_tag}...HEAD" if latest_tag else "HEAD"
        return self._query("log", "--pretty=format:* %s (%h)", revision_range) or None

    def before_bump(self) -> None:
        self.context.run.update({"tagName": self.format(self.options.tag_name)})

    def before_release(self) -> None:
        try:
            if self.options.commit:
                self.shell.exec(["git", "add", ".", "--update"])
                self.shell.exec(
                    [
                        "git",
                        "commit",
                        "--message",
                        self.format(self.options.commit_message),
                        *self.options.commit_args,
                    ]
                )
            if self.options.tag:
                self.shell.exec(
                    [
                        "git",
                        "tag",
                        "--annotate",
                        "--message",
                        self.format(self.options.tag_annotation),
                        str(self.values["tagName"]),
                    ]
                )
        except ShellCommandError as e:
            raise GitError(
                "Failed to commit and tag the release",
                details=str(e),
                fix_hint="Run 'git status' to check the repository state",
            ) from e

    def feature_enabled(self, event: LifecycleEvent) -> bool:
        if event is LifecycleEvent.RELEASE:
            return self.options.push
        return True

    def confirmation(self, event: LifecycleEvent) -> PromptSpec | None:
        if event is LifecycleEvent.RELEASE:
            return PromptSpec("push", f"Push to {self.options.push_repo}?")
        return None

    def release(self) -> None:
        try:
            self.shell.exec(["git", "push", *self.options.push_args, self.options.push_repo])
        except ShellCommandError as e:
            raise GitError(
                f"Failed to push to {self.options.push_repo}",
                details=str(e),
                fix_hint="Check the remote exists and you have push access",
            ) from e
