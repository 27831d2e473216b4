"""
Auto Commit

Stage, describe, commit and push git changes with an AI-drafted message.
"""

__version__ = "1.0.5"

# Centralized commit types - single source of truth
# Used by: llm/base.py (system prompt, message cleanup)
COMMIT_TYPES = {
    'fix': 'A bug fix',
    'feat': 'A new feature or capability',
    'chore': 'Maintenance tasks, dependencies, tooling',
    'refactor': 'Code restructuring without behavior change',
    'perf': 'Performance improvement',
    'test': 'Adding or updating tests',
    'style': 'Formatting, whitespace, no code change',
    'ci': 'CI/CD configuration changes',
    'docs': 'Documentation only changes',
    'build': 'Build system or external dependency changes',
    'revert': 'Reverts a previous commit',
}

COMMIT_TYPE_NAMES = list(COMMIT_TYPES.keys())
