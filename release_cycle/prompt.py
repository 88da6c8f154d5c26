"""Operator prompts.

The orchestrator only talks to the Prompter protocol; TerminalPrompter is
the interactive implementation built on rich.prompt.
"""

from dataclasses import dataclass
from typing import Protocol

from rich.console import Console
from rich.prompt import Confirm, Prompt


@dataclass(frozen=True)
class PromptSpec:
    """A yes/no question guarding a phase.

    Attributes:
        name: Stable identifier (e.g. 'publish')
        message: Question shown to the operator
        default: Answer used when not interactive
    """

    name: str
    message: str
    default: bool = True


class Prompter(Protocol):
    def confirm(self, spec: PromptSpec) -> bool: ...

    def select(self, message: str, choices: list[str], default: str) -> str: ...


class TerminalPrompter:
    """Asks questions on the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def confirm(self, spec: PromptSpec) -> bool:
        return Confirm.ask(spec.message, default=spec.default, console=self.console)

    def select(self, message: str, choices: list[str], default: str) -> str:
        """Ask for one of choices; an empty list accepts free text."""
        if default:
            return Prompt.ask(message, choices=choices or None, default=default, console=self.console)
        return Prompt.ask(message, choices=choices or None, console=self.console)
