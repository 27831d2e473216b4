"""Workflow states, step log and result types."""

import enum
from dataclasses import dataclass, field
from typing import Iterator, Optional


class WorkflowState(enum.Enum):
    CHECKING = "checking"
    STAGE_CHANGES = "stage_changes"
    GENERATING = "generating"
    CONFIRM_COMMIT = "confirm_commit"
    CONFIRM_PUSH = "confirm_push"
    PUSHING = "pushing"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def needs_decision(self) -> bool:
        return self in DECISION_STATES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


DECISION_STATES = frozenset({
    WorkflowState.STAGE_CHANGES,
    WorkflowState.CONFIRM_COMMIT,
    WorkflowState.CONFIRM_PUSH,
})
TERMINAL_STATES = frozenset({WorkflowState.COMPLETE, WorkflowState.ERROR})


@dataclass(frozen=True)
class StepEvent:
    label: str
    detail: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.label}: {self.detail}" if self.detail else self.label


@dataclass
class StepReporter:
    """Append-only log of what the workflow did, for the final summary."""
    _events: list[StepEvent] = field(default_factory=list)

    def record(self, label: str, detail: Optional[str] = None) -> StepEvent:
        event = StepEvent(label, detail)
        self._events.append(event)
        return event

    @property
    def events(self) -> tuple[StepEvent, ...]:
        return tuple(self._events)

    def lines(self) -> list[str]:
        return [str(event) for event in self._events]

    def labels(self) -> list[str]:
        return [event.label for event in self._events]

    def __iter__(self) -> Iterator[StepEvent]:
        return iter(tuple(self._events))

    def __len__(self) -> int:
        return len(self._events)


@dataclass
class CommitResult:
    message: str
    pr_url: Optional[str] = None
