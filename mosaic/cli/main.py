"""Main CLI entry point for mosaic."""

import argparse
import sys
from typing import Optional

from .commands import compose_fragments


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the mosaic CLI."""
    parser = argparse.ArgumentParser(
        prog='mosaic',
        description='Compose documents from modular text fragments'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    compose_parser = subparsers.add_parser('compose', help='Compose a fragment tree')
    compose_parser.add_argument(
        'selector',
        type=str,
        help="Root selector: 'path/to/fragment', '@path/to/fragment' or '#id'"
    )
    compose_parser.add_argument(
        '--root',
        type=str,
        help='Fragment root directory (default: config root or current directory)'
    )
    compose_parser.add_argument(
        '--config',
        type=str,
        help='Path to a YAML compose config (root, variables, overrides)'
    )
    compose_parser.add_argument(
        '--var',
        action='append',
        metavar='KEY=VALUE',
        help='Global variable (can be specified multiple times)'
    )
    compose_parser.add_argument(
        '--vars-file',
        type=str,
        help='Path to a JSON or YAML file containing global variables'
    )
    compose_parser.add_argument(
        '--output',
        type=str,
        metavar='FILE',
        help='Write the composed text to FILE instead of stdout'
    )
    compose_parser.add_argument(
        '--strict',
        action='store_true',
        help='Exit with code 3 when any diagnostic was recorded'
    )
    compose_parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    compose_parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    compose_parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='warn',
        help='Set log level'
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'compose':
        return compose_fragments(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
