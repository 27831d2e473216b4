"""CLI Argument Parsing"""

import argparse
import argcomplete

from autocommit import __version__
from autocommit.config import DEFAULT_OLLAMA_HOST, DEFAULT_OLLAMA_MODEL, DEFAULT_OPENAI_MODEL, VALID_PROVIDERS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='auto-commit',
        description='A CLI tool to automate git commit and push',
        epilog='Example: auto-commit --provider ollama commit'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    # AI provider options
    parser.add_argument('-p', '--provider', type=str, choices=sorted(VALID_PROVIDERS), help='AI provider to use (default: openai)')
    parser.add_argument('--openai-api-key', type=str, metavar='KEY', help='OpenAI API key (default: $OPENAI_API_KEY)')
    parser.add_argument('--openai-model', type=str, metavar='MODEL', help=f'OpenAI model to use (default: {DEFAULT_OPENAI_MODEL})')
    parser.add_argument('--ollama-host', type=str, metavar='URL', help=f'Ollama host URL (default: {DEFAULT_OLLAMA_HOST})')
    parser.add_argument('--ollama-model', type=str, metavar='MODEL', help=f'Ollama model to use (default: {DEFAULT_OLLAMA_MODEL})')

    # Output options
    parser.add_argument('--verbose', action='store_true', help='Log git commands and workflow transitions to stderr')
    parser.add_argument('--display-config', action='store_true', help='Show the resolved configuration and exit')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.add_parser('commit', help='Commit changes to the local git repository')

    argcomplete.autocomplete(parser)
    return parser
