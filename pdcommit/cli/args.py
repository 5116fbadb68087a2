"""CLI Argument Parsing"""

import argparse
import argcomplete

from pdcommit import COMMIT_TYPE_NAMES, __version__

COMMANDS = ['commit', 'init', 'sync', 'man']


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pdcommit',
        description='Pipedream Git Commit Helper: workflow-aware commit messages',
        epilog="Run 'pdcommit man' for the full manual."
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('command', nargs='?', default='commit', choices=COMMANDS,
                        help='init: scan workflows, sync: rescan and merge, man: manual, commit (default)')

    # Commit options
    parser.add_argument('-t', '--type', type=str, choices=COMMIT_TYPE_NAMES, help='Commit type (skips the menu)')
    parser.add_argument('-m', '--message', type=str, metavar='TEXT', help='Commit message text (skips the prompt)')
    parser.add_argument('-a', '--all', action='store_true', help='Stage unstaged changes without asking')
    parser.add_argument('-y', '--yes', action='store_true', help='Commit without the final confirmation')
    parser.add_argument('--dry-run', action='store_true', help='Show the git command, do not commit')

    # LLM drafting
    parser.add_argument('--suggest', action='store_true', help='Draft the message text with an LLM')
    parser.add_argument('--hint', type=str, metavar='TEXT', help='Context for --suggest: --hint "retry on timeout"')
    parser.add_argument('-p', '--provider', type=str, choices=['auto', 'ollama', 'claude'], help='LLM provider for --suggest')
    parser.add_argument('--model', type=str, metavar='MODEL', help='Model name for --suggest')

    # Output / setup
    parser.add_argument('--verbose', action='store_true', help='Show how changed files were matched')
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--install-completion', action='store_true', help='Install shell tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
