"""Command line interface package."""

import os
from typing import Optional

import click
from dotenv import load_dotenv

from ..config import AppConfig
from .commands.ask import ask
from .commands.index import index
from .commands.query import query
from .commands.search import search
from .ui.logging import setup_logging

# Load environment variables
load_dotenv()


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv)")
@click.option(
    "--api-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory containing OpenAPI files (default: $API_DIR or assets/apis)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, api_dir: Optional[str]) -> None:
    """API Spec Search CLI"""
    config = AppConfig.from_env()
    if api_dir:
        config = config.model_copy(update={"api_dir": api_dir})

    setup_logging(verbose, config.log_level if "LOG_LEVEL" in os.environ else None)
    ctx.obj = config


# Register commands
cli.add_command(search)
cli.add_command(ask)
cli.add_command(query)
cli.add_command(index)

__all__ = ["cli"]
