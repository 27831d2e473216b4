"""
Tests for pull request URL resolution.

Run with:
    pytest tests/test_pull_request.py -v
"""

import http.client
import io
import json
import urllib.error
import urllib.parse

import pytest

from autocommit.git.pull_request import PullRequestResolver, new_pull_request_url, parse_github_remote


class FakeResponse:
    def __init__(self, payload):
        self._body = payload if isinstance(payload, bytes) else json.dumps(payload).encode('utf-8')

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False


@pytest.fixture
def fake_urlopen(monkeypatch):
    """Make urlopen return `outcome` (or raise it); returns the request log."""
    def _install(outcome):
        requests = []

        def urlopen(req, timeout=None):
            requests.append(req)
            if isinstance(outcome, Exception):
                raise outcome
            return FakeResponse(outcome)

        monkeypatch.setattr("urllib.request.urlopen", urlopen)
        return requests
    return _install


class TestParseGithubRemote:

    @pytest.mark.parametrize("url", [
        "https://github.com/acme/widgets",
        "https://github.com/acme/widgets.git",
        "https://user@github.com/acme/widgets",
        "git@github.com:acme/widgets",
        "git@github.com:acme/widgets.git",
        "ssh://git@github.com/acme/widgets.git",
    ])
    def test_github_forms(self, url):
        assert parse_github_remote(url) == ("acme", "widgets")

    @pytest.mark.parametrize("url", [
        "No remote",
        "https://gitlab.com/acme/widgets",
        "https://github.com/acme",
        "",
    ])
    def test_not_github(self, url):
        assert parse_github_remote(url) is None


class TestPullRequestResolver:

    def test_without_token_links_new_pull_request(self, fake_urlopen):
        requests = fake_urlopen(AssertionError("no lookup without a token"))
        url = PullRequestResolver().resolve("git@github.com:acme/widgets", "feature/login")

        assert url == "https://github.com/acme/widgets/pull/new/feature/login"
        assert requests == []

    def test_existing_pull_request(self, fake_urlopen):
        requests = fake_urlopen([{"number": 7, "html_url": "https://github.com/acme/widgets/pull/7"}])
        url = PullRequestResolver(token="ghp_abc").resolve("https://github.com/acme/widgets", "feature/login")

        assert url == "https://github.com/acme/widgets/pull/7"
        req = requests[0]
        query = urllib.parse.parse_qs(urllib.parse.urlparse(req.full_url).query)
        assert query["head"] == ["acme:feature/login"]
        assert query["state"] == ["open"]
        assert req.get_header("Authorization") == "token ghp_abc"

    def test_no_open_pull_request(self, fake_urlopen):
        fake_urlopen([])
        url = PullRequestResolver(token="ghp_abc").resolve("https://github.com/acme/widgets", "main")
        assert url == new_pull_request_url("acme", "widgets", "main")

    @pytest.mark.parametrize("outcome", [
        urllib.error.HTTPError("https://api.github.com", 401, "Unauthorized", {}, io.BytesIO(b"")),
        urllib.error.URLError("Name or service not known"),
        TimeoutError("timed out"),
        b"<html>",
        {"message": "Not Found"},
    ])
    def test_lookup_failure_falls_back(self, fake_urlopen, outcome):
        fake_urlopen(outcome)
        url = PullRequestResolver(token="ghp_abc").resolve("https://github.com/acme/widgets", "main")
        assert url == "https://github.com/acme/widgets/pull/new/main"

    @pytest.mark.parametrize("body", [b"\xff\xfe\x00not utf-8", b"\x80[]"])
    def test_undecodable_body_falls_back(self, fake_urlopen, body):
        fake_urlopen(body)
        url = PullRequestResolver(token="ghp_abc").resolve("https://github.com/acme/widgets", "main")
        assert url == "https://github.com/acme/widgets/pull/new/main"

    def test_truncated_body_falls_back(self, monkeypatch):
        class Truncated(FakeResponse):
            def read(self):
                raise http.client.IncompleteRead(b"[", 512)

        monkeypatch.setattr("urllib.request.urlopen", lambda req, timeout=None: Truncated([]))
        url = PullRequestResolver(token="ghp_abc").resolve("https://github.com/acme/widgets", "main")
        assert url == "https://github.com/acme/widgets/pull/new/main"

    @pytest.mark.parametrize("branch, suffix", [
        ("feature/login", "feature/login"),
        ("fix#12", "fix%2312"),
        ("what?now", "what%3Fnow"),
    ])
    def test_branch_is_quoted(self, branch, suffix):
        assert new_pull_request_url("acme", "widgets", branch) == f"https://github.com/acme/widgets/pull/new/{suffix}"

    def test_non_github_remote(self, fake_urlopen):
        fake_urlopen(AssertionError("no lookup for other hosts"))
        assert PullRequestResolver(token="ghp_abc").resolve("https://gitlab.com/acme/widgets", "main") is None

    def test_detached_head(self):
        assert PullRequestResolver().resolve("https://github.com/acme/widgets", "") is None
