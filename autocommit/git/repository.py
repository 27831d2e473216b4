"""Repository Inspector - typed wrappers around the git commands the workflow needs."""

import enum
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

NO_REMOTE = "No remote"
REMOTE_NAME = "origin"


class RepoError(Exception):
    """Raised when a git command fails."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class PreconditionError(Exception):
    """The workflow cannot start at all."""
    pass


class GitNotFoundError(RepoError, PreconditionError):
    """The git binary is not installed or not on PATH."""
    pass


class NotARepositoryError(RepoError, PreconditionError):
    """The working directory is not inside a git work tree."""
    pass


class CommitError(RepoError):
    """Nothing staged, or git refused the commit."""
    pass


class PushFailure(enum.Enum):
    NO_UPSTREAM = "no upstream"
    REJECTED = "rejected"
    TRANSPORT = "network or authentication failure"


# Checked in order; anything unmatched is a transport problem
_PUSH_FAILURE_MARKERS = [
    (PushFailure.NO_UPSTREAM, ("no upstream", "does not appear to be a git repository")),
    (PushFailure.REJECTED, ("[rejected]", "non-fast-forward", "fetch first", "rejected")),
]


class PushError(RepoError):
    """Push failed. `failure` says why in broad terms, `stderr` has git's words."""

    def __init__(self, failure: PushFailure, stderr: str = ""):
        detail = stderr.strip() or failure.value
        super().__init__(detail, stderr)
        self.failure = failure

    @classmethod
    def from_stderr(cls, stderr: str) -> 'PushError':
        lowered = stderr.lower()
        for failure, markers in _PUSH_FAILURE_MARKERS:
            if any(marker in lowered for marker in markers):
                return cls(failure, stderr)
        return cls(PushFailure.TRANSPORT, stderr)


@dataclass
class StatusSummary:
    """Staged and unstaged paths parsed from `git status --porcelain`."""
    staged: list[str] = field(default_factory=list)
    unstaged: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.staged or self.unstaged)


@dataclass
class RepoSnapshot:
    """Repository facts captured right before generating a message."""
    staged_files: list[str]
    unstaged_files: list[str]
    branch: str
    remote_url: str
    diff: str
    diff_stat: str


def parse_status(lines: list[str]) -> StatusSummary:
    """Classify short-status lines into staged and unstaged paths.

    Column one is the index, column two the work tree. A partially
    staged file lands in both lists; untracked (`??`) files count as
    unstaged.
    """
    summary = StatusSummary()
    for line in lines:
        if len(line) < 4:
            continue
        status, path = line[:2], line[3:]

        if status == '??':
            summary.unstaged.append(path)
            continue
        if status[0] not in ' ?':
            summary.staged.append(path)
        if status[1] not in ' ?':
            summary.unstaged.append(path)

    return summary


class Repository:
    """The only component that talks to git."""

    def __init__(self, cwd: Path | None = None):
        self.cwd = cwd

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        logger.debug("git %s", ' '.join(args))
        try:
            result = subprocess.run(
                ['git', *args],
                cwd=self.cwd,
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise RepoError(f"Git command failed: git {' '.join(args)}\n{e.stderr}", e.stderr or "")
        except FileNotFoundError:
            raise GitNotFoundError("Git is not installed or not in PATH")

    def is_repository(self) -> bool:
        try:
            return self._run_git('rev-parse', '--is-inside-work-tree').strip() == 'true'
        except GitNotFoundError:
            raise
        except RepoError:
            return False

    def status_porcelain(self) -> list[str]:
        # Only trailing newlines go: a leading space is a status column
        output = self._run_git('status', '--porcelain')
        return [line for line in output.rstrip('\n').split('\n') if line.strip()]

    def status(self) -> StatusSummary:
        return parse_status(self.status_porcelain())

    def status_short(self) -> str:
        return self._run_git('status', '--short')

    def diff_staged(self) -> str:
        return self._run_git('diff', '--staged')

    def diff_staged_stat(self) -> str:
        """Summary line of the staged diff, e.g. '3 files changed, 10 insertions(+)'."""
        lines = self._run_git('diff', '--staged', '--stat').strip().split('\n')
        return lines[-1].strip()

    def current_branch(self) -> str:
        return self._run_git('branch', '--show-current').strip()

    def remote_url(self) -> str:
        try:
            url = self._run_git('remote', 'get-url', REMOTE_NAME).strip()
        except GitNotFoundError:
            raise
        except RepoError:
            return NO_REMOTE
        return url.removesuffix('.git') if url else NO_REMOTE

    def stage_all(self) -> None:
        self._run_git('add', '-A')

    def commit(self, message: str) -> None:
        if not self.diff_staged().strip():
            raise CommitError("Nothing staged to commit")
        try:
            self._run_git('commit', '-m', message)
        except GitNotFoundError:
            raise
        except RepoError as e:
            raise CommitError(e.stderr.strip() or str(e), e.stderr)

    def remote_branch_exists(self, name: str) -> bool:
        """True if `origin` has exactly refs/heads/<name>."""
        if not name:
            return False
        ref = f'refs/heads/{name}'
        try:
            output = self._run_git('ls-remote', '--heads', REMOTE_NAME, ref)
        except GitNotFoundError:
            raise
        except RepoError as e:
            logger.debug("Remote branch probe failed: %s", e)
            return False
        return any(line.split('\t')[-1] == ref for line in output.splitlines())

    def diff_shortstat(self, ref: str) -> str:
        return self._run_git('diff', '--shortstat', f'{ref}...HEAD').strip()

    def push(self, branch: str) -> None:
        try:
            self._run_git('push', REMOTE_NAME, branch)
        except GitNotFoundError:
            raise
        except RepoError as e:
            raise PushError.from_stderr(e.stderr)
