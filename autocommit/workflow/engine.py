"""Workflow Engine

Drives one commit run as an explicit state machine:

    CHECKING -> STAGE_CHANGES? -> GENERATING -> CONFIRM_COMMIT
             -> CONFIRM_PUSH? -> PUSHING -> COMPLETE

with ERROR reachable from every non-terminal state. Each call to
`Workflow.advance()` performs exactly one transition. The three
confirmation states need an operator decision; everything else runs
on its own. Nothing is retried: a failed run ends in ERROR and the
operator starts over.
"""

import logging
from typing import Optional

from autocommit.git.pull_request import PullRequestResolver
from autocommit.git.repository import (
    CommitError, NotARepositoryError, PushError, RepoError, RepoSnapshot,
    Repository, StatusSummary, REMOTE_NAME,
)
from autocommit.llm.base import CommitMessageGenerator, GenerationError, build_generation_input
from autocommit.workflow.state import CommitResult, StepReporter, WorkflowState

logger = logging.getLogger(__name__)

NO_CHANGES = "No changes to commit"
COMMIT_ABORTED = "Commit aborted"


class TransitionError(RuntimeError):
    """advance() was called in a way the current state does not allow."""
    pass


class Workflow:
    """The commit/push state machine.

    Owns the state, the step log and the per-run snapshots; nothing
    here is shared across runs.
    """

    def __init__(
        self,
        repo: Repository,
        generator: CommitMessageGenerator,
        reporter: Optional[StepReporter] = None,
        pr_resolver: Optional[PullRequestResolver] = None,
    ):
        self.repo = repo
        self.generator = generator
        self.reporter = reporter if reporter is not None else StepReporter()
        self.pr_resolver = pr_resolver if pr_resolver is not None else PullRequestResolver()

        self.state = WorkflowState.CHECKING
        self.status: StatusSummary = StatusSummary()
        self.snapshot: Optional[RepoSnapshot] = None
        self.result: Optional[CommitResult] = None
        self.push_stat = ""
        self.error: Optional[str] = None
        self._committed = False

        self._handlers = {
            WorkflowState.CHECKING: self._check,
            WorkflowState.STAGE_CHANGES: self._stage_changes,
            WorkflowState.GENERATING: self._generate,
            WorkflowState.CONFIRM_COMMIT: self._confirm_commit,
            WorkflowState.CONFIRM_PUSH: self._confirm_push,
            WorkflowState.PUSHING: self._push,
        }

    @property
    def awaiting_decision(self) -> bool:
        return self.state.needs_decision

    @property
    def finished(self) -> bool:
        return self.state.is_terminal

    @property
    def pr_url(self) -> Optional[str]:
        return self.result.pr_url if self.result else None

    def advance(self, decision: Optional[bool] = None) -> WorkflowState:
        """Perform one transition from the current state and return the new one.

        Raises NotARepositoryError (and any other RepoError that is not a
        commit or push failure) straight to the caller: those abort the
        process rather than end the workflow.
        """
        if self.finished:
            raise TransitionError(f"Workflow already finished in state {self.state.name}")
        if self.awaiting_decision and decision is None:
            raise TransitionError(f"{self.state.name} needs a yes/no decision")
        if not self.awaiting_decision and decision is not None:
            raise TransitionError(f"{self.state.name} does not take a decision")

        handler = self._handlers[self.state]
        previous = self.state
        self.state = handler(decision) if self.awaiting_decision else handler()
        logger.debug("%s -> %s", previous.name, self.state.name)
        return self.state

    def _fail(self, message: str) -> WorkflowState:
        self.error = message
        return WorkflowState.ERROR

    def _check(self) -> WorkflowState:
        if not self.repo.is_repository():
            raise NotARepositoryError("Not inside a Git repository.")

        self.status = self.repo.status()
        if not self.status.has_changes:
            return self._fail(NO_CHANGES)
        if self.status.unstaged:
            return WorkflowState.STAGE_CHANGES
        return WorkflowState.GENERATING

    def _stage_changes(self, stage_all: bool) -> WorkflowState:
        if stage_all:
            self.repo.stage_all()
            self.reporter.record("Staged changes", "All files staged")
            return WorkflowState.GENERATING

        self.reporter.record("Staging skipped", "Proceeding with already staged changes")
        if not self.status.staged:
            return self._fail(NO_CHANGES)
        return WorkflowState.GENERATING

    def _take_snapshot(self) -> RepoSnapshot:
        status = self.repo.status()
        return RepoSnapshot(
            staged_files=status.staged,
            unstaged_files=status.unstaged,
            branch=self.repo.current_branch(),
            remote_url=self.repo.remote_url(),
            diff=self.repo.diff_staged(),
            diff_stat=self.repo.diff_staged_stat(),
        )

    def _generate(self) -> WorkflowState:
        self.snapshot = self._take_snapshot()
        if not self.snapshot.diff.strip():
            return self._fail(NO_CHANGES)

        combined = build_generation_input(self.repo.status_short(), self.snapshot.diff)
        try:
            message = self.generator.generate_commit_message(combined)
        except GenerationError as e:
            logger.debug("%s backend failed (%s)", e.provider_label, e.failure.value)
            return self._fail(f"Failed to generate commit message: {e.cause}")

        if not message.strip():
            return self._fail("Failed to generate commit message: empty response")

        self.result = CommitResult(message=message)
        self.reporter.record("Generated commit message", message)
        return WorkflowState.CONFIRM_COMMIT

    def _confirm_commit(self, accept: bool) -> WorkflowState:
        if not accept:
            self.reporter.record(COMMIT_ABORTED, "User chose not to commit")
            return self._fail(COMMIT_ABORTED)

        try:
            self.repo.commit(self.result.message)
        except CommitError as e:
            return self._fail(f"Failed to commit: {e}")
        self._committed = True
        self.reporter.record("Committed changes", self.result.message)

        branch = self.snapshot.branch
        if not self.repo.remote_branch_exists(branch):
            return WorkflowState.COMPLETE

        try:
            self.push_stat = self.repo.diff_shortstat(f"{REMOTE_NAME}/{branch}")
        except RepoError as e:
            # Remote ref not fetched locally; show the staged stat instead
            logger.debug("Could not compare against %s/%s: %s", REMOTE_NAME, branch, e)
            self.push_stat = self.snapshot.diff_stat
        return WorkflowState.CONFIRM_PUSH

    def _confirm_push(self, accept: bool) -> WorkflowState:
        if not accept:
            self.reporter.record("Push skipped", "Changes committed but not pushed")
            return WorkflowState.COMPLETE
        return WorkflowState.PUSHING

    def _push(self) -> WorkflowState:
        if not self._committed:
            raise TransitionError("Refusing to push without a commit in this run")

        branch = self.snapshot.branch
        try:
            self.repo.push(branch)
        except PushError as e:
            self.reporter.record("Push failed", str(e))
            return self._fail(f"Failed to push: {e}")
        self.reporter.record("Pushed changes", f"Branch: {branch}")

        pr_url = self.pr_resolver.resolve(self.snapshot.remote_url, branch)
        if pr_url:
            self.result.pr_url = pr_url
            self.reporter.record("Pull request", pr_url)
        return WorkflowState.COMPLETE
