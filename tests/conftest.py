"""Pytest fixtures for release-cycle tests.

Provides common fixtures for:
- Temporary project directories
- A recording shell that never spawns processes
- Fake prompters and a mocked logger
- Hook maps that echo their own key
"""

import json
import subprocess
from collections.abc import Generator, Iterable, Mapping
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from release_cycle.config.models import ReleaseConfig
from release_cycle.hooks import HookResolver
from release_cycle.lifecycle import LIFECYCLE, RunContext
from release_cycle.log import ReleaseLog
from release_cycle.plugins import PluginContext
from release_cycle.prompt import PromptSpec
from release_cycle.shell import ShellExecutor


class RecordingShell(ShellExecutor):
    """ShellExecutor that records commands instead of running them.

    Args:
        log: Logger (usually a mock)
        responses: Rendered command -> stdout for successful commands
        failures: Rendered commands that exit with status 1
        dry_run: Passed through to ShellExecutor
    """

    def __init__(
        self,
        log: ReleaseLog,
        responses: Mapping[str, str] | None = None,
        failures: Iterable[str] = (),
        dry_run: bool = False,
    ) -> None:
        super().__init__(log, dry_run=dry_run)
        self.responses = dict(responses or {})
        self.failures = set(failures)
        self.commands: list[str] = []

    def _spawn(self, command: str | list[str]) -> subprocess.CompletedProcess[str]:
        display = command if isinstance(command, str) else " ".join(command)
        self.commands.append(display)
        if display in self.failures:
            return subprocess.CompletedProcess(display, 1, stdout="", stderr=f"{display}: failed")
        return subprocess.CompletedProcess(display, 0, stdout=self.responses.get(display, ""), stderr="")


class FakePrompter:
    """Prompter with scripted answers.

    Confirmations are answered from ``answers`` by prompt name (default
    True); selections return ``selection``. Every question is recorded.
    """

    def __init__(self, answers: Mapping[str, bool] | None = None, selection: str = "patch") -> None:
        self.answers = dict(answers or {})
        self.selection = selection
        self.asked: list[str] = []

    def confirm(self, spec: PromptSpec) -> bool:
        self.asked.append(spec.name)
        return self.answers.get(spec.name, True)

    def select(self, message: str, choices: list[str], default: str) -> str:
        self.asked.append(message)
        return self.selection


def get_hooks(namespaces: Iterable[str]) -> dict[str, str]:
    """Build a hook map where every hook echoes its own key.

    Returns:
        Hook key -> ``echo <key>`` for every global and scoped key
    """
    hooks = {}
    for event in LIFECYCLE:
        for prefix in ("before", "after"):
            key = f"{prefix}:{event.value}"
            hooks[key] = f"echo {key}"
            for namespace in namespaces:
                key = f"{prefix}:{namespace}:{event.value}"
                hooks[key] = f"echo {key}"
    return hooks


def echoed(commands: Iterable[str]) -> list[str]:
    """Hook keys echoed by the commands from get_hooks()."""
    return [command.removeprefix("echo ") for command in commands if command.startswith("echo ")]


@pytest.fixture
def temp_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary directory for tests.

    Yields:
        Path to temporary directory
    """
    yield tmp_path


@pytest.fixture
def project_dir(temp_dir: Path) -> Path:
    """Create a temporary project directory.

    Returns:
        Path to project directory
    """
    project = temp_dir / "test-project"
    project.mkdir()
    return project


@pytest.fixture
def nodejs_project(project_dir: Path) -> Path:
    """Create a Node.js project with package.json.

    Returns:
        Path to project directory
    """
    package_json: dict[str, Any] = {
        "name": "test-package",
        "version": "1.0.0",
        "description": "Test package",
        "main": "index.js",
    }
    (project_dir / "package.json").write_text(json.dumps(package_json, indent=2))
    return project_dir


@pytest.fixture
def mock_log() -> MagicMock:
    """Return a logger mock; ``is_verbose`` is off."""
    log = MagicMock(spec=ReleaseLog)
    log.is_verbose = False
    return log


@pytest.fixture
def shell(mock_log: MagicMock) -> RecordingShell:
    """Return a recording shell where every command succeeds silently."""
    return RecordingShell(mock_log)


@pytest.fixture
def prompter() -> FakePrompter:
    """Return a prompter that accepts everything."""
    return FakePrompter()


def make_plugin_context(
    project_root: Path,
    shell: RecordingShell,
    config: ReleaseConfig | None = None,
    **options: Any,
) -> PluginContext:
    """Build the context a plugin receives from the TaskRunner."""
    return PluginContext(
        project_root=project_root,
        config=config or ReleaseConfig(ci=True),
        shell=shell,
        log=shell.log,
        run=RunContext(hooks=HookResolver()),
        options=options,
    )
