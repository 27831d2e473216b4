"""CLI Main Entry Point"""

import logging
import sys

from autocommit.cli.args import build_parser
from autocommit.cli.commands import display_config
from autocommit.cli.utils import confirm, display_file_list, display_summary
from autocommit.config import github_token, load_config, resolve_provider_config
from autocommit.git import PreconditionError, PullRequestResolver, RepoError, Repository
from autocommit.llm import get_generator
from autocommit.output import (
    Spinner, bold, colorize_commit_type, dim, info, link, print_box, print_error, print_success,
)
from autocommit.workflow import Workflow, WorkflowState

PROGRESS_LABELS = {
    WorkflowState.CHECKING: "Checking git repository...",
    WorkflowState.GENERATING: "Generating commit message...",
    WorkflowState.PUSHING: "Pushing changes to remote...",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )


def _ask_stage(workflow):
    display_file_list("Staged changes:", workflow.status.staged, staged=True)
    display_file_list("Unstaged changes detected:", workflow.status.unstaged, staged=False)
    print()
    return confirm("Do you want to stage all changes?")


def _ask_commit(workflow):
    print(bold("Commit with the following message?"))
    print_box(colorize_commit_type(workflow.result.message))
    return confirm("Commit?")


def _ask_push(workflow):
    snapshot = workflow.snapshot
    print(f"{dim('Branch:')} {info(snapshot.branch)} {dim('|')} {dim('Changes:')} {workflow.push_stat or snapshot.diff_stat}")
    print(f"{dim('Remote:')} {link(f'{snapshot.remote_url}/tree/{snapshot.branch}')}")
    return confirm("Do you want to push these changes to remote?")


PROMPTS = {
    WorkflowState.STAGE_CHANGES: _ask_stage,
    WorkflowState.CONFIRM_COMMIT: _ask_commit,
    WorkflowState.CONFIRM_PUSH: _ask_push,
}


def _report_outcome(workflow) -> None:
    display_summary(workflow.reporter.lines())
    print()
    if workflow.state is WorkflowState.COMPLETE:
        print_success("Operation completed successfully!")
        if workflow.pr_url:
            print(f"Pull Request URL: {link(workflow.pr_url)}")
    else:
        print_error(f"Error: {workflow.error}")


def run_workflow(workflow: Workflow) -> int:
    """Drive the workflow to a terminal state, prompting at each decision point."""
    while not workflow.finished:
        if workflow.awaiting_decision:
            decision = PROMPTS[workflow.state](workflow)
            workflow.advance(decision)
            continue
        with Spinner(PROGRESS_LABELS.get(workflow.state, "")):
            workflow.advance()

    _report_outcome(workflow)
    # A workflow ERROR is a reported outcome, not a crash
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        provider_config = resolve_provider_config(
            args.provider,
            load_config(),
            api_key=args.openai_api_key,
            openai_model=args.openai_model,
            ollama_host=args.ollama_host,
            ollama_model=args.ollama_model,
        )
    except ValueError as e:
        print_error(str(e))
        return 1

    if args.display_config:
        return display_config(provider_config)

    if args.command != 'commit':
        parser.print_help()
        return 1

    workflow = Workflow(
        repo=Repository(),
        generator=get_generator(provider_config),
        pr_resolver=PullRequestResolver(token=github_token()),
    )
    try:
        return run_workflow(workflow)
    except (PreconditionError, RepoError) as e:
        # Outside the state machine: not a repository, or git itself failed
        print_error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print()
        print(dim("Cancelled."))
        return 130
