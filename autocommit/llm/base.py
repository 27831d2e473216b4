"""LLM Base Classes and Shared Code"""

import enum
import re
from abc import ABC, abstractmethod

from autocommit import COMMIT_TYPE_NAMES
from autocommit.config import ProviderKind

TYPES_PATTERN = '|'.join(COMMIT_TYPE_NAMES)

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates concise and descriptive git commit "
    "messages based on code diffs changed lines (+/-). Always start a line with a "
    "conventional commit type, for example: 'fix: issue with the login page' "
    f"[{', '.join(COMMIT_TYPE_NAMES)}]. If there are multiple unrelated changes, "
    "return a list of commit messages separated by new lines. The user will provide "
    "the git status and diff. Return the commit message only, no other text."
)

PROVIDER_LABELS = {
    ProviderKind.HOSTED: "OpenAI",
    ProviderKind.LOCAL: "Ollama",
}


class GenerationFailure(enum.Enum):
    MISSING_CREDENTIAL = "missing credential"
    MODEL_NOT_FOUND = "model not found"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate limited"
    UNREACHABLE = "service unreachable"
    MALFORMED_RESPONSE = "malformed response"
    SERVICE_ERROR = "service error"


class GenerationError(Exception):
    """Raised when a backend cannot produce a commit message.

    `str(error)` is the human-readable cause; `provider` and `failure`
    say which backend failed and how.
    """

    def __init__(self, provider: ProviderKind, failure: GenerationFailure, cause: str):
        super().__init__(cause)
        self.provider = provider
        self.failure = failure
        self.cause = cause

    @property
    def provider_label(self) -> str:
        return PROVIDER_LABELS.get(self.provider, self.provider.value)


def build_generation_input(status: str, diff: str) -> str:
    """Combine short status and staged diff into the text sent to the model."""
    return f"Git status:\n{status.rstrip()}\n\nGit diff:\n{diff.rstrip()}"


_JUNK_LINE = re.compile(r'^(diff --git |@@\s|[+-]{3}\s[ab]/|index [0-9a-f]|```)')


def clean_commit_message(text: str) -> str:
    """Clean up a model response down to just the commit message(s)."""
    lines = text.strip().split('\n')

    # Drop chatty preamble before the first conventional line
    start_idx = 0
    for i, line in enumerate(lines):
        if re.match(rf'^[`\s]*({TYPES_PATTERN})[\(!:]', line):
            start_idx = i
            break

    # Cut off echoed diff output or a closing code fence
    end_idx = len(lines)
    for i in range(start_idx + 1, len(lines)):
        if _JUNK_LINE.match(lines[i]):
            end_idx = i
            break

    lines = lines[start_idx:end_idx]
    cleaned = [line.strip('`').strip() if line.lstrip().startswith('`') else line.rstrip() for line in lines]
    return '\n'.join(cleaned).strip()


class CommitMessageGenerator(ABC):
    """Abstract base for commit message backends."""

    kind: ProviderKind

    @abstractmethod
    def generate_commit_message(self, diff: str) -> str:
        """Return the commit message for `diff` or raise GenerationError."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    def _fail(self, failure: GenerationFailure, cause: str) -> GenerationError:
        return GenerationError(self.kind, failure, cause)
