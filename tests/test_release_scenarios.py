"""End-to-end release runs with the built-in plugins.

Every command goes through RecordingShell, which answers git queries with
canned output, so no repository, registry or forge is touched. Each hook
echoes its own key; the echoed keys are what the assertions look at.

Scenarios:
1. No hooks, non-interactive: first release of an empty project
2. All publish flags off: no namespace's release hooks fire
3. npm bump fails: the run stops after git's bump hooks
4. Happy path: every release target publishes 1.1.0
"""

import re
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from conftest import FakePrompter, RecordingShell, echoed, get_hooks

from release_cycle.config.models import ReleaseConfig
from release_cycle.exceptions import ConfigurationError, PluginError, ValidationError
from release_cycle.lifecycle import LifecycleEvent, PhaseOutcome, ReleaseSummary
from release_cycle.tasks import TaskRunner, run_tasks

NAMESPACES = ["git", "github", "gitlab", "npm"]

GIT_RESPONSES = {
    "git rev-parse --git-dir": ".git",
    "git status --porcelain --untracked-files=no": "",
    "git remote get-url origin": "https://github.com/owner/project.git",
    "git rev-parse --abbrev-ref HEAD": "main",
    "git describe --tags --abbrev=0": "1.0.0",
    "git log -1 --format=%s": "Add feature",
    "git log --pretty=format:* %s (%h) 1.0.0...HEAD": "* Add feature (abc1234)",
}

NPM_BUMP = "npm version 1.1.0 --no-git-tag-version"


def release_config(**overrides: Any) -> ReleaseConfig:
    """Configuration for a minor release with every target enabled."""
    data: dict[str, Any] = {
        "ci": True,
        "increment": "minor",
        "hooks": get_hooks(NAMESPACES),
        "github": {"release": True, "skip_checks": True},
        "gitlab": {"release": True, "skip_checks": True},
        "npm": {"skip_checks": True},
    }
    data.update(overrides)
    return ReleaseConfig(**data)


def run_release(
    project_dir: Path,
    shell: RecordingShell,
    config: ReleaseConfig,
    prompter: FakePrompter | None = None,
) -> ReleaseSummary:
    return TaskRunner(
        config=config,
        log=shell.log,
        shell=shell,
        prompter=prompter,
        project_root=project_dir,
    ).run()


@pytest.fixture
def git_shell(mock_log: MagicMock) -> RecordingShell:
    """Recording shell inside a git repository tagged 1.0.0."""
    return RecordingShell(mock_log, responses=GIT_RESPONSES)


class TestScenarios:
    """The four reference release runs."""

    def test_no_hooks_first_release(self, project_dir: Path, mock_log: MagicMock) -> None:
        """Scenario 1: outside git, without package.json, nothing configured."""
        shell = RecordingShell(mock_log, failures={"git rev-parse --git-dir"})

        summary = run_release(project_dir, shell, ReleaseConfig(ci=True))

        assert summary.succeeded
        assert summary.as_result()["name"] == "test-project"
        assert summary.version == "0.0.1"
        assert shell.commands == ["git rev-parse --git-dir"]
        last_line = mock_log.log.call_args_list[-1].args[0]
        assert re.fullmatch(r"Done \(in \d+s\.\)", last_line)

    def test_publish_flags_disabled(self, nodejs_project: Path, git_shell: RecordingShell) -> None:
        """Scenario 2: every release phase is skipped, global hooks still run."""
        config = release_config(
            git={"push": False},
            github={"release": False},
            gitlab={"release": False},
            npm={"publish": False},
        )

        summary = run_release(nodejs_project, git_shell, config)

        keys = echoed(git_shell.commands)
        assert "before:init" in keys
        assert "after:afterRelease" in keys
        assert "after:release" in keys
        for namespace in NAMESPACES:
            assert f"after:{namespace}:release" not in keys
            assert summary.outcome(LifecycleEvent.RELEASE, namespace) is PhaseOutcome.SKIPPED
        assert "git push --follow-tags origin" not in git_shell.commands
        assert "npm publish . --tag latest" not in git_shell.commands

    def test_npm_bump_fails(self, nodejs_project: Path, mock_log: MagicMock) -> None:
        """Scenario 3: git's bump hooks ran, nothing after npm's bump did."""
        shell = RecordingShell(mock_log, responses=GIT_RESPONSES, failures={NPM_BUMP})

        with pytest.raises(PluginError) as exc_info:
            run_release(nodejs_project, shell, release_config())

        keys = echoed(shell.commands)
        assert "after:git:bump" in keys
        assert "after:npm:bump" not in keys
        assert "after:bump" not in keys
        assert not [key for key in keys if key.startswith("after:") and key.endswith(":release")]

        error = exc_info.value
        assert error.event is LifecycleEvent.BUMP
        assert error.namespace == "npm"
        assert error.summary is not None
        assert error.summary.outcome(LifecycleEvent.BUMP, "npm") is PhaseOutcome.FAILED

    def test_happy_path(self, nodejs_project: Path, git_shell: RecordingShell) -> None:
        """Scenario 4: every target releases 'Release 1.1.0' tagged 1.1.0."""
        summary = run_release(nodejs_project, git_shell, release_config())

        assert summary.as_result() == {
            "name": "test-package",
            "latestVersion": "1.0.0",
            "version": "1.1.0",
            "changelog": "* Add feature (abc1234)",
        }

        keys = echoed(git_shell.commands)
        for key in [
            "after:git:release",
            "after:github:release",
            "after:gitlab:release",
            "after:npm:release",
            "after:git:bump",
            "after:npm:bump",
        ]:
            assert keys.count(key) == 1, f"{key} should run exactly once"

        notes = "* Add feature (abc1234)"
        for command in [
            NPM_BUMP,
            "git add . --update",
            "git commit --message Release 1.1.0",
            "git tag --annotate --message Release 1.1.0 1.1.0",
            "git push --follow-tags origin",
            f"gh release create 1.1.0 --title Release 1.1.0 --notes {notes} --repo owner/project",
            f"glab release create 1.1.0 --name Release 1.1.0 --notes {notes} --repo owner/project",
            "npm publish . --tag latest",
        ]:
            assert command in git_shell.commands, f"missing: {command}"

        # bump, then commit, then push
        order = [
            git_shell.commands.index(command)
            for command in [NPM_BUMP, "git commit --message Release 1.1.0", "git push --follow-tags origin"]
        ]
        assert order == sorted(order)


class TestBuiltinPlugins:
    """Behaviour of the built-in plugins within a full run."""

    def test_release_url_reaches_hooks(self, nodejs_project: Path, mock_log: MagicMock) -> None:
        gh_command = (
            "gh release create 1.1.0 --title Release 1.1.0 "
            "--notes * Add feature (abc1234) --repo owner/project"
        )
        responses = {
            **GIT_RESPONSES,
            gh_command: "https://github.com/owner/project/releases/tag/1.1.0",
        }
        shell = RecordingShell(mock_log, responses=responses)
        config = release_config(
            hooks={"after:github:release": "echo released ${releaseUrl} for ${repo.owner}"},
            gitlab={"enabled": False},
        )

        run_release(nodejs_project, shell, config)

        assert (
            "echo released https://github.com/owner/project/releases/tag/1.1.0 for owner"
            in shell.commands
        )

    def test_dirty_working_directory(self, nodejs_project: Path, mock_log: MagicMock) -> None:
        responses = {**GIT_RESPONSES, "git status --porcelain --untracked-files=no": "M index.js"}
        shell = RecordingShell(mock_log, responses=responses)

        with pytest.raises(PluginError) as exc_info:
            run_release(nodejs_project, shell, release_config())

        assert exc_info.value.event is LifecycleEvent.INIT
        assert exc_info.value.namespace == "git"
        assert isinstance(exc_info.value.__cause__, ValidationError)
        assert "after:git:init" not in echoed(shell.commands)

    def test_declined_push(self, nodejs_project: Path, git_shell: RecordingShell) -> None:
        prompter = FakePrompter({"push": False})
        config = release_config(ci=False)

        summary = run_release(nodejs_project, git_shell, config, prompter=prompter)

        keys = echoed(git_shell.commands)
        assert summary.outcome(LifecycleEvent.RELEASE, "git") is PhaseOutcome.CANCELLED
        assert "git push --follow-tags origin" not in git_shell.commands
        assert "after:git:release" not in keys
        assert "after:npm:release" in keys
        assert prompter.asked == ["push", "release", "release", "publish"]

    def test_dry_run_only_reads(self, nodejs_project: Path, mock_log: MagicMock) -> None:
        shell = RecordingShell(mock_log, responses=GIT_RESPONSES, dry_run=True)

        summary = run_release(nodejs_project, shell, release_config(dry_run=True))

        assert summary.version == "1.1.0"
        assert "git describe --tags --abbrev=0" in shell.commands
        assert not [command for command in shell.commands if command.startswith("echo ")]
        for command in ["git commit", "git push", "npm version", "npm publish", "gh release"]:
            assert not [spawned for spawned in shell.commands if spawned.startswith(command)]

    def test_private_package_is_not_published(
        self, nodejs_project: Path, git_shell: RecordingShell
    ) -> None:
        (nodejs_project / "package.json").write_text(
            '{"name": "internal", "version": "1.0.0", "private": true}'
        )

        summary = run_release(nodejs_project, git_shell, release_config())

        assert summary.outcome(LifecycleEvent.RELEASE, "npm") is PhaseOutcome.SKIPPED
        assert summary.outcome(LifecycleEvent.BUMP, "npm") is PhaseOutcome.EXECUTED

    @pytest.mark.parametrize(
        "section",
        [
            {"git": {"commit_message": "Release ${nope}"}},
            {"git": {"tag_name": "v${nope}"}},
            {"github": {"release": True, "skip_checks": True, "release_name": "${nope}"}},
            {"gitlab": {"release": True, "skip_checks": True, "release_name": "${nope}"}},
        ],
    )
    def test_unknown_template_variable_stops_before_any_phase(
        self, nodejs_project: Path, git_shell: RecordingShell, section: dict[str, Any]
    ) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            run_release(nodejs_project, git_shell, release_config(**section))

        assert exc_info.value.exit_code == 2
        assert "nope" in exc_info.value.message
        assert git_shell.commands == ["git rev-parse --git-dir"]

    def test_prerelease_package_version_defers_to_git_tag(
        self, nodejs_project: Path, git_shell: RecordingShell
    ) -> None:
        (nodejs_project / "package.json").write_text(
            '{"name": "test-package", "version": "1.0.0-rc.1"}'
        )

        summary = run_release(nodejs_project, git_shell, release_config())

        assert summary.latest_version == "1.0.0"
        assert summary.version == "1.1.0"
        assert NPM_BUMP in git_shell.commands
        git_shell.log.warn.assert_called()

    def test_run_tasks_defaults(self, project_dir: Path, mock_log: MagicMock) -> None:
        """run_tasks() uses the registered plugins and stays non-interactive in CI."""
        shell = RecordingShell(mock_log, failures={"git rev-parse --git-dir"})

        summary = run_tasks(ReleaseConfig(ci=True, increment="2.0.0"), project_dir, mock_log, shell)

        assert summary.version == "2.0.0"
