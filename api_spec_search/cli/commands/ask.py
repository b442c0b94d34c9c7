"""Ask command."""

import asyncio
import logging
import sys

import click
from rich.console import Console

from ...answer.router import create_router
from ...config import AppConfig
from .search import print_json

logger = logging.getLogger(__name__)
console = Console()


@click.command()
@click.argument("question")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_obj
def ask(config: AppConfig, question: str, output_format: str) -> None:
    """Answer a question naming an HTTP method and path."""
    try:
        router = create_router(config)
        response = asyncio.run(router.process_question(question))

        if output_format == "json":
            print_json(response.to_dict())
            return

        console.print(response.text, highlight=False, markup=False)
        console.print(f"Source: {response.citation}", style="dim")

    except Exception as e:
        logger.error(f"Question failed: {e}")
        console.print(f"[red]Error:[/red] {str(e)}")
        sys.exit(1)
