"""Unit tests for command execution.

Tests cover:
- release_cycle.utils.shell: run(), strip_ansi(), format_command()
- ShellExecutor: templating, dry run, failures and command echo
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from conftest import RecordingShell

from release_cycle.exceptions import ConfigurationError, ShellCommandError
from release_cycle.lifecycle import initial_values
from release_cycle.shell import CommandResult, ShellExecutor
from release_cycle.utils.shell import format_command, run, strip_ansi


class TestStripAnsi:
    """Tests for strip_ansi."""

    def test_removes_color_codes(self) -> None:
        assert strip_ansi("\x1b[32mv1.2.3\x1b[0m") == "v1.2.3"

    def test_keeps_newlines(self) -> None:
        assert strip_ansi("a\nb\tc") == "a\nb\tc"

    def test_empty(self) -> None:
        assert strip_ansi("") == ""


class TestRun:
    """Tests for run() against real processes."""

    def test_list_command(self, temp_dir: Path) -> None:
        result = run(["echo", "hello"], cwd=temp_dir)
        assert result.stdout.strip() == "hello"

    def test_string_command_uses_shell(self, temp_dir: Path) -> None:
        result = run("echo one && echo two", cwd=temp_dir)
        assert result.stdout.split() == ["one", "two"]

    def test_failure_raises(self, temp_dir: Path) -> None:
        with pytest.raises(ShellCommandError) as exc_info:
            run("echo oops >&2; exit 3", cwd=temp_dir)
        assert exc_info.value.returncode == 3
        assert exc_info.value.stderr.strip() == "oops"

    def test_failure_without_check(self, temp_dir: Path) -> None:
        result = run("exit 1", cwd=temp_dir, check=False)
        assert result.returncode == 1

    def test_format_command_quotes_arguments(self) -> None:
        assert format_command(["git", "commit", "--message", "Release 1.0.0"]) == (
            "git commit --message 'Release 1.0.0'"
        )
        assert format_command("echo ${version}") == "echo ${version}"


class TestShellExecutor:
    """Tests for ShellExecutor."""

    def test_renders_template(self, mock_log: MagicMock) -> None:
        shell = RecordingShell(mock_log)
        result = shell.exec("echo ${name}@${version}", {"name": "pkg", "version": "1.0.0"})

        assert shell.commands == ["echo pkg@1.0.0"]
        assert result.command == "echo pkg@1.0.0"
        assert result.ok

    def test_unset_variable_renders_empty(self, mock_log: MagicMock) -> None:
        shell = RecordingShell(mock_log)
        shell.exec("echo [${releaseUrl}]", initial_values())
        assert shell.commands == ["echo []"]

    def test_unknown_variable_is_configuration_error(self, mock_log: MagicMock) -> None:
        shell = RecordingShell(mock_log)
        with pytest.raises(ConfigurationError):
            shell.exec("echo ${unknown}", initial_values())
        assert shell.commands == []

    def test_argument_lists_are_not_templated(self, mock_log: MagicMock) -> None:
        shell = RecordingShell(mock_log)
        shell.exec(["echo", "${version}"], {"version": "1.0.0"})
        assert shell.commands == ["echo ${version}"]

    def test_output_is_stripped(self, mock_log: MagicMock) -> None:
        shell = RecordingShell(mock_log, responses={"git describe": "v1.0.0\n"})
        assert shell.exec("git describe").stdout == "v1.0.0"

    def test_failure_raises(self, mock_log: MagicMock) -> None:
        shell = RecordingShell(mock_log, failures={"npm publish"})
        with pytest.raises(ShellCommandError) as exc_info:
            shell.exec("npm publish")
        assert exc_info.value.command == "npm publish"
        assert exc_info.value.returncode == 1

    def test_failure_without_check(self, mock_log: MagicMock) -> None:
        shell = RecordingShell(mock_log, failures={"git rev-parse --git-dir"})
        result = shell.exec(["git", "rev-parse", "--git-dir"], write=False, check=False)
        assert not result.ok

    def test_dry_run_skips_write_commands(self, mock_log: MagicMock) -> None:
        """Commands that change state are echoed and report success without running."""
        shell = RecordingShell(mock_log, failures={"npm publish"}, dry_run=True)
        result = shell.exec("npm publish")

        assert shell.commands == []
        assert result == CommandResult(command="npm publish")
        mock_log.exec.assert_called_once_with("npm publish", dry_run=True, external=False)

    def test_dry_run_still_runs_read_only_commands(self, mock_log: MagicMock) -> None:
        shell = RecordingShell(mock_log, responses={"git status --porcelain": "M file"}, dry_run=True)
        result = shell.exec(["git", "status", "--porcelain"], write=False)

        assert shell.commands == ["git status --porcelain"]
        assert result.stdout == "M file"

    def test_formatted_command_is_external(self, mock_log: MagicMock) -> None:
        shell = RecordingShell(mock_log)
        shell.exec_formatted_command("echo ${version}", {"version": "2.0.0"})
        mock_log.exec.assert_called_once_with("echo 2.0.0", dry_run=False, external=True)

    def test_real_spawn(self, mock_log: MagicMock, temp_dir: Path) -> None:
        """The default spawn step runs the command in cwd."""
        (temp_dir / "marker.txt").write_text("x")
        shell = ShellExecutor(mock_log, cwd=temp_dir)
        result = shell.exec("ls", write=False)
        assert "marker.txt" in result.stdout
