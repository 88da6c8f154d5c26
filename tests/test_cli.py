"""Tests for the release-cycle command-line interface.

Tests cover:
- --version
- 'hooks': the hook plan table
- 'release': CLI flags reaching the configuration, exit codes on failure
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml
from typer.testing import CliRunner

from release_cycle import __version__
from release_cycle.cli import app
from release_cycle.exceptions import PluginError
from release_cycle.lifecycle import LifecycleEvent, PhaseOutcome, PhaseResult, ReleaseSummary


@pytest.fixture
def cli_runner() -> CliRunner:
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def in_project(project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the CLI from inside the project directory."""
    monkeypatch.chdir(project_dir)
    return project_dir


def make_summary(failed: PhaseResult | None = None) -> ReleaseSummary:
    return ReleaseSummary(
        name="test-project",
        latest_version="1.0.0",
        version="1.0.1",
        changelog="",
        elapsed=0.5,
        results=(PhaseResult(LifecycleEvent.BUMP, "npm", PhaseOutcome.EXECUTED),),
        failed=failed,
    )


class TestVersionOption:
    """Tests for --version."""

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestHooksCommand:
    """Tests for the hooks command."""

    def test_no_hooks(self, cli_runner: CliRunner, in_project: Path) -> None:
        result = cli_runner.invoke(app, ["hooks"])
        assert result.exit_code == 0
        assert "No hooks configured" in result.output

    def test_lists_hooks(self, cli_runner: CliRunner, in_project: Path) -> None:
        config = {
            "hooks": {
                "before:init": "npm test",
                "after:npm:release": {"run": "echo published", "fatal": False},
            }
        }
        (in_project / ".release-cycle.yml").write_text(yaml.safe_dump(config))

        result = cli_runner.invoke(app, ["hooks"])

        assert result.exit_code == 0
        assert "before:init" in result.output
        assert "after:npm:release" in result.output
        assert "non-fatal" in result.output
        assert result.output.index("before:init") < result.output.index("after:npm:release")

    def test_invalid_hook_key(self, cli_runner: CliRunner, in_project: Path) -> None:
        (in_project / ".release-cycle.yml").write_text(
            yaml.safe_dump({"hooks": {"before:deploy": "echo"}})
        )

        result = cli_runner.invoke(app, ["hooks"])

        assert result.exit_code == 2
        assert "Error:" in result.output


class TestReleaseCommand:
    """Tests for the release command."""

    @patch("release_cycle.cli.TaskRunner")
    def test_flags_reach_configuration(
        self, mock_runner: MagicMock, cli_runner: CliRunner, in_project: Path
    ) -> None:
        mock_runner.return_value.run.return_value = make_summary()

        result = cli_runner.invoke(app, ["release", "minor", "--ci", "--dry-run"])

        assert result.exit_code == 0, result.output
        config = mock_runner.call_args.kwargs["config"]
        assert config.increment == "minor"
        assert config.ci is True
        assert config.dry_run is True
        assert mock_runner.call_args.kwargs["prompter"] is None
        assert mock_runner.call_args.kwargs["shell"].dry_run is True
        assert "DRY RUN MODE" in result.output

    @patch("release_cycle.cli.TaskRunner")
    def test_file_settings_kept_without_flags(
        self, mock_runner: MagicMock, cli_runner: CliRunner, in_project: Path
    ) -> None:
        (in_project / ".release-cycle.yml").write_text(
            yaml.safe_dump({"ci": True, "increment": "major"})
        )
        mock_runner.return_value.run.return_value = make_summary()

        result = cli_runner.invoke(app, ["release"])

        assert result.exit_code == 0, result.output
        config = mock_runner.call_args.kwargs["config"]
        assert config.ci is True
        assert config.increment == "major"

    def test_invalid_increment(self, cli_runner: CliRunner, in_project: Path) -> None:
        result = cli_runner.invoke(app, ["release", "huge", "--ci"])
        assert result.exit_code == 2
        assert "Error:" in result.output

    @patch("release_cycle.cli.TaskRunner")
    def test_plugin_failure_exit_code(
        self, mock_runner: MagicMock, cli_runner: CliRunner, in_project: Path
    ) -> None:
        error = PluginError("npm failed during bump", event=LifecycleEvent.BUMP, namespace="npm")
        error.summary = make_summary(
            failed=PhaseResult(LifecycleEvent.BUMP, "npm", PhaseOutcome.FAILED, "boom")
        )
        mock_runner.return_value.run.side_effect = error

        result = cli_runner.invoke(app, ["release", "--ci"])

        assert result.exit_code == PluginError.exit_code
        assert "npm failed during bump" in result.output
        assert "DONE" in result.output
