"""
Search Command for API Spec Search CLI

Ranks operations for a natural-language query and prints them as a table or
as JSON.

Example Usage:
    $ api-spec-search search "create a todo"
    $ api-spec-search search --format json "title"
    $ api-spec-search search --rebuild "タスク 作成"
"""

import asyncio
import json
import logging
import sys
from typing import Sequence

import click
from rich.console import Console
from rich.table import Table

from ...answer.router import create_router
from ...config import AppConfig
from ...search.search_models import SearchCandidate

logger = logging.getLogger(__name__)
console = Console()


def render_candidates(candidates: Sequence[SearchCandidate], title: str) -> Table:
    """Build the results table for ranked candidates."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold magenta",
    )

    table.add_column("Score", justify="right", style="cyan")
    table.add_column("Method", justify="left", style="green")
    table.add_column("Path", justify="left", style="blue")
    table.add_column("Summary", justify="left")
    table.add_column("Match", justify="left", style="yellow")
    table.add_column("Spec", justify="left", style="dim")

    for candidate in candidates:
        match = candidate.matched_property_path or candidate.source_type
        table.add_row(
            f"{candidate.score:.3f}",
            candidate.method,
            candidate.path,
            candidate.summary or "",
            match,
            candidate.spec_name,
        )

    return table


def print_json(data: dict) -> None:
    click.echo(json.dumps(data, ensure_ascii=False, indent=2))


@click.command()
@click.argument("query")
@click.option("--rebuild", is_flag=True, help="Reload API files and rebuild the index first")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.pass_obj
def search(config: AppConfig, query: str, rebuild: bool, output_format: str) -> None:
    """Search for API operations.

    Args:
        config: Configuration from the CLI group
        query: Search query
        rebuild: Rebuild the index before searching
        output_format: table or json
    """
    try:
        router = create_router(config)
        response = asyncio.run(router.process_search(query, force_reload=rebuild))

        if output_format == "json":
            print_json(response.to_dict())
            return

        if not response.candidates:
            console.print(response.message, style="yellow")
            return

        console.print(render_candidates(response.candidates, f"Search Results for: {query}"))

    except Exception as e:
        logger.error(f"Search failed: {e}")
        console.print(f"[red]Error:[/red] {str(e)}")
        sys.exit(1)
