"""Pull Request URL Resolution

Best-effort only: every failure here ends in "no URL" or the
"open a new pull request" link, never in an exception.
"""

import http.client
import json
import logging
import re
import socket
import urllib.error
import urllib.parse
import urllib.request

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
GITHUB_WEB = "https://github.com"
LOOKUP_TIMEOUT = 10

# https://github.com/o/r, ssh://git@github.com/o/r, git@github.com:o/r
_GITHUB_REMOTE = re.compile(
    r'^(?:(?:https?|ssh|git)://(?:[^@/]+@)?github\.com[:/]|[^@\s]+@github\.com:)'
    r'(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$'
)


class PullRequestLookupError(Exception):
    """The pull request query failed. Never leaves this module."""
    pass


def parse_github_remote(url: str) -> tuple[str, str] | None:
    """Extract (owner, repo) from a GitHub remote URL, or None."""
    match = _GITHUB_REMOTE.match(url.strip())
    if not match:
        return None
    return match.group('owner'), match.group('repo')


def new_pull_request_url(owner: str, repo: str, branch: str) -> str:
    return f"{GITHUB_WEB}/{owner}/{repo}/pull/new/{urllib.parse.quote(branch, safe='/')}"


class PullRequestResolver:
    """Finds the open pull request for a branch, or the link to open one."""

    def __init__(self, token: str | None = None, timeout: int = LOOKUP_TIMEOUT):
        self.token = token
        self.timeout = timeout

    def resolve(self, remote_url: str, branch: str) -> str | None:
        parsed = parse_github_remote(remote_url)
        if parsed is None or not branch:
            return None
        owner, repo = parsed

        if self.token:
            try:
                existing = self._find_open(owner, repo, branch)
            except PullRequestLookupError as e:
                logger.debug("Pull request lookup skipped: %s", e)
            else:
                if existing:
                    return existing

        return new_pull_request_url(owner, repo, branch)

    def _find_open(self, owner: str, repo: str, branch: str) -> str | None:
        query = urllib.parse.urlencode({"head": f"{owner}:{branch}", "state": "open"})
        req = urllib.request.Request(
            f"{GITHUB_API}/repos/{owner}/{repo}/pulls?{query}",
            headers={
                "Authorization": f"token {self.token}",
                "Accept": "application/vnd.github+json",
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                pulls = json.loads(response.read().decode('utf-8'))
        except urllib.error.HTTPError as e:
            raise PullRequestLookupError(f"GitHub API returned {e.code}")
        except (urllib.error.URLError, socket.timeout, OSError) as e:
            raise PullRequestLookupError(f"GitHub API unreachable: {e}")
        except http.client.HTTPException as e:
            raise PullRequestLookupError(f"Incomplete response from GitHub API: {e!r}")
        except ValueError:
            # Undecodable bytes or invalid JSON
            raise PullRequestLookupError("GitHub API returned an unreadable body")

        if not isinstance(pulls, list):
            raise PullRequestLookupError("Unexpected GitHub API response")
        for pull in pulls:
            if isinstance(pull, dict) and pull.get("html_url"):
                return pull["html_url"]
        return None
