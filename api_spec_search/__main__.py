"""
Main Entry Point for API Spec Search

Example Usage:
    $ python -m api_spec_search search "create a todo"
    $ python -m api_spec_search ask "Explain GET /todos/{id} in detail"
    $ python -m api_spec_search query "title"
    $ python -m api_spec_search --api-dir specs index
"""

import sys
from typing import Optional, Sequence

import click

from .cli import cli


def main(args: Optional[Sequence[str]] = None) -> int:
    """Main entry point.

    Args:
        args: Command line arguments.
            Defaults to sys.argv[1:].

    Returns:
        Exit code.
    """
    try:
        cli(args=args)
        return 0

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
