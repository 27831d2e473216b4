"""Commit Workflow Package"""

from autocommit.workflow.engine import Workflow, TransitionError, NO_CHANGES, COMMIT_ABORTED
from autocommit.workflow.state import (
    WorkflowState, StepEvent, StepReporter, CommitResult, DECISION_STATES, TERMINAL_STATES,
)

__all__ = [
    "Workflow",
    "TransitionError",
    "WorkflowState",
    "StepEvent",
    "StepReporter",
    "CommitResult",
    "DECISION_STATES",
    "TERMINAL_STATES",
    "NO_CHANGES",
    "COMMIT_ABORTED",
]
