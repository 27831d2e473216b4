"""
Tests for the command line: argument handling, prompts and output.

Run with:
    pytest tests/test_cli.py -v
    pytest tests/test_cli.py -v -s   # see actual terminal output
"""

import re

import pytest

import autocommit.config
from autocommit.cli import main as cli_main
from autocommit.cli.utils import confirm, display_file_list, display_summary, mask_secret
from autocommit.config import ConfigManager
from autocommit.git import StatusSummary
from autocommit.workflow import StepReporter, WorkflowState

ANSI_RE = re.compile(r'\033\[[0-9;]*m')


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def strip_ansi():
    """Return a function that removes ANSI escape codes."""
    def _strip(text: str) -> str:
        return ANSI_RE.sub('', text)
    return _strip


@pytest.fixture
def clean_env(tmp_path, monkeypatch):
    """No config files, no provider variables, fresh config cache."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("pathlib.Path.home", lambda: home)
    monkeypatch.setattr(autocommit.config, "_manager", ConfigManager())
    for var in ("AUTO_COMMIT_PROVIDER", "OPENAI_API_KEY", "OPENAI_MODEL", "OLLAMA_HOST", "GITHUB_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def answers(monkeypatch):
    """Feed scripted replies to input(); returns the list of prompts shown."""
    def _install(*replies):
        queue = list(replies)
        prompts = []

        def fake_input(prompt=""):
            prompts.append(prompt)
            reply = queue.pop(0)
            if isinstance(reply, BaseException):
                raise reply
            return reply

        monkeypatch.setattr("builtins.input", fake_input)
        return prompts
    return _install


# ---------------------------------------------------------------------------
# confirm()
# ---------------------------------------------------------------------------

class TestConfirm:

    @pytest.mark.parametrize("reply, expected", [
        ("y", True),
        ("YES", True),
        ("n", False),
        (" no ", False),
        ("", True),
    ])
    def test_replies(self, answers, reply, expected):
        answers(reply)
        assert confirm("Commit?") is expected

    def test_empty_reply_uses_default(self, answers):
        answers("")
        assert confirm("Push?", default=False) is False

    def test_reasks_on_garbage(self, answers, capsys):
        prompts = answers("maybe", "y")
        assert confirm("Commit?") is True
        assert len(prompts) == 2
        assert "Please answer y or n" in capsys.readouterr().out

    @pytest.mark.parametrize("interrupt", [KeyboardInterrupt(), EOFError()])
    def test_interrupt_means_no(self, answers, interrupt):
        answers(interrupt)
        assert confirm("Commit?") is False


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

class TestDisplay:

    def test_file_list(self, capsys, strip_ansi):
        display_file_list("Unstaged changes detected:", ["notes.txt", "src/app.py"], staged=False)
        out = strip_ansi(capsys.readouterr().out)
        assert "Unstaged changes detected:" in out
        assert "  notes.txt" in out
        assert "  src/app.py" in out

    def test_empty_file_list_prints_nothing(self, capsys):
        display_file_list("Staged changes:", [], staged=True)
        assert capsys.readouterr().out == ""

    def test_summary_box(self, capsys, strip_ansi):
        display_summary(["Committed changes: feat: add login page", "Push skipped: Changes committed but not pushed"])
        out = strip_ansi(capsys.readouterr().out)
        assert "Committed changes: feat: add login page" in out
        assert "Push skipped" in out

    @pytest.mark.parametrize("value, expected", [("sk-abc", "********"), ("", "Not set"), (None, "Not set")])
    def test_mask_secret(self, value, expected):
        assert mask_secret(value) == expected


# ---------------------------------------------------------------------------
# run_workflow()
# ---------------------------------------------------------------------------

class ScriptedWorkflow:
    """Walks a fixed list of states and records the decisions it receives."""

    def __init__(self, states, error=None, pr_url=None):
        self._states = list(states)
        self.state = self._states.pop(0)
        self.error = error
        self.pr_url = pr_url
        self.decisions = []
        self.reporter = StepReporter()

    @property
    def finished(self):
        return self.state.is_terminal

    @property
    def awaiting_decision(self):
        return self.state.needs_decision

    def advance(self, decision=None):
        self.decisions.append(decision)
        self.state = self._states.pop(0)
        return self.state


class TestRunWorkflow:

    def test_prompts_at_decision_states(self, monkeypatch, capsys, strip_ansi):
        asked = []

        def prompt(workflow):
            asked.append(workflow.state)
            return True
        monkeypatch.setattr(cli_main, "PROMPTS", {
            WorkflowState.CONFIRM_COMMIT: prompt,
            WorkflowState.CONFIRM_PUSH: prompt,
        })
        workflow = ScriptedWorkflow(
            [WorkflowState.GENERATING, WorkflowState.CONFIRM_COMMIT, WorkflowState.CONFIRM_PUSH,
             WorkflowState.PUSHING, WorkflowState.COMPLETE],
            pr_url="https://github.com/acme/widgets/pull/new/main",
        )
        workflow.reporter.record("Pushed changes", "Branch: main")

        assert cli_main.run_workflow(workflow) == 0
        assert asked == [WorkflowState.CONFIRM_COMMIT, WorkflowState.CONFIRM_PUSH]
        assert workflow.decisions == [None, True, True, None]

        out = strip_ansi(capsys.readouterr().out)
        assert "Pushed changes: Branch: main" in out
        assert "Operation completed successfully!" in out
        assert "Pull Request URL: https://github.com/acme/widgets/pull/new/main" in out

    def test_error_outcome_exits_zero(self, capsys, strip_ansi):
        workflow = ScriptedWorkflow([WorkflowState.CHECKING, WorkflowState.ERROR], error="No changes to commit")

        assert cli_main.run_workflow(workflow) == 0
        captured = capsys.readouterr()
        assert "Error: No changes to commit" in strip_ansi(captured.err)
        assert "completed successfully" not in captured.out


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------

class CleanRepository:
    def __init__(self, is_repo=True):
        self.is_repo = is_repo

    def is_repository(self):
        return self.is_repo

    def status(self):
        return StatusSummary()


class TestMain:

    def test_no_command_prints_help(self, clean_env, capsys):
        assert cli_main.main([]) == 1
        assert "usage: auto-commit" in capsys.readouterr().out

    def test_display_config_masks_key(self, clean_env, monkeypatch, capsys, strip_ansi):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-very-secret")
        assert cli_main.main(["--display-config"]) == 0

        out = strip_ansi(capsys.readouterr().out)
        assert "sk-very-secret" not in out
        assert "API key: ********" in out
        assert "AI Provider: openai" in out
        assert "Pull request lookup: disabled" in out

    def test_display_config_local_provider(self, clean_env, capsys, strip_ansi):
        assert cli_main.main(["--provider", "ollama", "--ollama-model", "codellama", "--display-config"]) == 0

        out = strip_ansi(capsys.readouterr().out)
        assert "AI Provider: ollama" in out
        assert "host:    http://127.0.0.1:11434" in out
        assert "model:   codellama" in out

    def test_unknown_provider_in_environment(self, clean_env, monkeypatch, capsys):
        monkeypatch.setenv("AUTO_COMMIT_PROVIDER", "claude")
        assert cli_main.main(["commit"]) == 1
        assert "Unknown provider: claude" in capsys.readouterr().err

    def test_not_a_repository(self, clean_env, monkeypatch, capsys):
        monkeypatch.setattr(cli_main, "Repository", lambda: CleanRepository(is_repo=False))
        assert cli_main.main(["commit"]) == 1
        assert "Not inside a Git repository." in capsys.readouterr().err

    def test_nothing_to_commit(self, clean_env, monkeypatch, capsys):
        monkeypatch.setattr(cli_main, "Repository", CleanRepository)
        assert cli_main.main(["commit"]) == 0
        assert "No changes to commit" in capsys.readouterr().err
