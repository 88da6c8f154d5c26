"""Confirmation gate around confirmable phases."""

from collections.abc import Callable

from release_cycle.lifecycle import DEPENDENCIES, LifecycleEvent, PhaseOutcome, RunContext
from release_cycle.log import ReleaseLog
from release_cycle.prompt import Prompter, PromptSpec


class ConfirmationGate:
    """Runs a unit of work behind an optional operator confirmation.

    A declined prompt yields CANCELLED rather than an exception. Every answer
    is remembered in the RunContext, so a phase that depends on a declined
    one is cancelled without asking again.

    Args:
        log: Logger
        prompter: Interactive prompter, None when not interactive
        ci: Use each prompt's default answer instead of asking
    """

    def __init__(self, log: ReleaseLog, prompter: Prompter | None = None, ci: bool = False) -> None:
        self.log = log
        self.prompter = prompter
        self.ci = ci or prompter is None

    def run(
        self,
        context: RunContext,
        namespace: str,
        event: LifecycleEvent,
        prompt: PromptSpec | None,
        action: Callable[[], object],
    ) -> PhaseOutcome:
        if context.is_blocked(namespace, event):
            dependency = DEPENDENCIES[event]
            self.log.verbose(
                f"{namespace}: {event.value} cancelled ({dependency.value} was declined)"
            )
            return PhaseOutcome.CANCELLED

        if prompt is not None:
            confirmed = self.ask(prompt)
            context.remember(namespace, event, confirmed)
            if not confirmed:
                self.log.verbose(f"{namespace}: {event.value} declined")
                return PhaseOutcome.CANCELLED

        action()
        return PhaseOutcome.EXECUTED

    def ask(self, prompt: PromptSpec) -> bool:
        if self.ci or self.prompter is None:
            return prompt.default
        return self.prompter.confirm(prompt)
