"""Lifecycle data model shared by the orchestrator, the gate and plugins.

The release runs through a fixed sequence of events. For every
(event, namespace) pair the orchestrator records a PhaseOutcome, and
the outcome alone decides whether the namespace's "after" hook fires.
"""

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from release_cycle.hooks import HookResolver


class LifecycleEvent(Enum):
    """Release lifecycle events, in execution order.

    Values are the names used in hook keys (``before:beforeBump``).
    """

    INIT = "init"
    BEFORE_BUMP = "beforeBump"
    BUMP = "bump"
    BEFORE_RELEASE = "beforeRelease"
    RELEASE = "release"
    AFTER_RELEASE = "afterRelease"

    @property
    def method_name(self) -> str:
        """Name of the plugin method implementing this event."""
        return _METHOD_NAMES[self]

    @classmethod
    def from_key(cls, name: str) -> "LifecycleEvent":
        """Look up an event by its hook-key name.

        Raises:
            ValueError: If name is not a lifecycle event
        """
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(event.value for event in cls)
            raise ValueError(f"Unknown lifecycle event '{name}' (expected one of: {valid})") from None


_METHOD_NAMES = {
    LifecycleEvent.INIT: "init",
    LifecycleEvent.BEFORE_BUMP: "before_bump",
    LifecycleEvent.BUMP: "bump",
    LifecycleEvent.BEFORE_RELEASE: "before_release",
    LifecycleEvent.RELEASE: "release",
    LifecycleEvent.AFTER_RELEASE: "after_release",
}

LIFECYCLE: tuple[LifecycleEvent, ...] = tuple(LifecycleEvent)

# A declined confirmation on the key event cancels the value event for the
# same namespace.
DEPENDENCIES: dict[LifecycleEvent, LifecycleEvent] = {
    LifecycleEvent.RELEASE: LifecycleEvent.BUMP,
}


class HookPrefix(Enum):
    """Hook position relative to the phase it wraps."""

    BEFORE = "before"
    AFTER = "after"


class PhaseOutcome(Enum):
    """Result of one (event, namespace) phase."""

    EXECUTED = "executed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"
    FAILED = "failed"


# Variables available to command templates.
TEMPLATE_VARIABLES: tuple[str, ...] = (
    "name",
    "version",
    "latestVersion",
    "changelog",
    "tagName",
    "latestTag",
    "branchName",
    "releaseUrl",
    "lastCommitMessage",
    "date",
    "repo.remote",
    "repo.protocol",
    "repo.host",
    "repo.owner",
    "repo.project",
    "repo.repository",
    "npm.name",
    "npm.tag",
)


@dataclass(frozen=True)
class PhaseResult:
    """Outcome of a single phase, as recorded by the orchestrator."""

    event: LifecycleEvent
    namespace: str
    outcome: PhaseOutcome
    message: str | None = None


def find_outcome(
    results: Iterable[PhaseResult], event: LifecycleEvent, namespace: str
) -> PhaseOutcome | None:
    """Outcome recorded for an (event, namespace) pair, or None."""
    for result in results:
        if result.event is event and result.namespace == namespace:
            return result.outcome
    return None


@dataclass(frozen=True)
class ReleaseSummary:
    """Final, immutable result of a release run."""

    name: str
    latest_version: str
    version: str | None
    changelog: str
    elapsed: float
    results: tuple[PhaseResult, ...] = ()
    failed: PhaseResult | None = None

    @property
    def succeeded(self) -> bool:
        return self.failed is None

    def outcome(self, event: LifecycleEvent, namespace: str) -> PhaseOutcome | None:
        return find_outcome(self.results, event, namespace)

    def as_result(self) -> dict[str, Any]:
        """Run result returned to callers."""
        return {
            "name": self.name,
            "latestVersion": self.latest_version,
            "version": self.version,
            "changelog": self.changelog,
        }


def initial_values() -> dict[str, object]:
    values: dict[str, object] = dict.fromkeys(TEMPLATE_VARIABLES, "")
    values["date"] = date.today().isoformat()
    return values


@dataclass
class RunContext:
    """Per-run state owned by the TaskRunner.

    Holds the hook snapshot, the namespaces taking part in the run, the
    operator's decisions, recorded phase outcomes and the values that
    command templates are rendered with. It is discarded when the run ends.
    """

    hooks: "HookResolver"
    namespaces: tuple[str, ...] = ()
    values: dict[str, object] = field(default_factory=initial_values)
    decisions: dict[tuple[str, LifecycleEvent], bool] = field(default_factory=dict)
    results: list[PhaseResult] = field(default_factory=list)
    started_at: float = field(default_factory=time.monotonic)

    def remember(self, namespace: str, event: LifecycleEvent, confirmed: bool) -> None:
        self.decisions[(namespace, event)] = confirmed

    def decision(self, namespace: str, event: LifecycleEvent) -> bool | None:
        return self.decisions.get((namespace, event))

    def is_blocked(self, namespace: str, event: LifecycleEvent) -> bool:
        """True when a phase this one depends on was declined."""
        dependency = DEPENDENCIES.get(event)
        if dependency is None:
            return False
        return self.decision(namespace, dependency) is False

    def record(
        self,
        event: LifecycleEvent,
        namespace: str,
        outcome: PhaseOutcome,
        message: str | None = None,
    ) -> PhaseResult:
        result = PhaseResult(event=event, namespace=namespace, outcome=outcome, message=message)
        self.results.append(result)
        return result

    def outcome(self, event: LifecycleEvent, namespace: str) -> PhaseOutcome | None:
        return find_outcome(self.results, event, namespace)

    def update(self, values: dict[str, object]) -> None:
        """Set template values; keys are dotted variable names."""
        self.values.update(values)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def summary(self, failed: PhaseResult | None = None) -> ReleaseSummary:
        version = self.values.get("version") or None
        return ReleaseSummary(
            name=str(self.values.get("name") or ""),
            latest_version=str(self.values.get("latestVersion") or ""),
            version=str(version) if version else None,
            changelog=str(self.values.get("changelog") or ""),
            elapsed=self.elapsed,
            results=tuple(self.results),
            failed=failed,
        )
