"""Git Operations Package"""

from autocommit.git.repository import (
    Repository, RepoSnapshot, StatusSummary, parse_status,
    RepoError, PreconditionError, GitNotFoundError, NotARepositoryError,
    CommitError, PushError, PushFailure, NO_REMOTE,
)
from autocommit.git.pull_request import PullRequestResolver, parse_github_remote

__all__ = [
    "Repository",
    "RepoSnapshot",
    "StatusSummary",
    "parse_status",
    "RepoError",
    "PreconditionError",
    "GitNotFoundError",
    "NotARepositoryError",
    "CommitError",
    "PushError",
    "PushFailure",
    "NO_REMOTE",
    "PullRequestResolver",
    "parse_github_remote",
]
