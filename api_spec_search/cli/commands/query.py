"""Unified query command: direct answers or search, whichever fits the input."""

import asyncio
import logging
import sys

import click
from rich.console import Console

from ...answer.router import RESULT_ANSWER, RESULT_CANDIDATES, create_router
from ...config import AppConfig
from .search import print_json, render_candidates

logger = logging.getLogger(__name__)
console = Console()


@click.command()
@click.argument("text")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_obj
def query(config: AppConfig, text: str, output_format: str) -> None:
    """Answer METHOD /path questions, search for anything else."""
    try:
        router = create_router(config)
        response = asyncio.run(router.process_unified(text))

        if output_format == "json":
            print_json(response.to_dict())
            return

        if response.result_type == RESULT_ANSWER and response.answer is not None:
            if response.auto_answered:
                console.print(f"Best match: {response.question}", style="bold")
            console.print(response.answer.text, highlight=False, markup=False)
            console.print(f"Source: {response.answer.citation}", style="dim")
        elif response.result_type == RESULT_CANDIDATES:
            console.print(render_candidates(response.candidates or [], f"Candidates for: {text}"))
        else:
            console.print(response.message, style="yellow")

    except Exception as e:
        logger.error(f"Query failed: {e}")
        console.print(f"[red]Error:[/red] {str(e)}")
        sys.exit(1)
