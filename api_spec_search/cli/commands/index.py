"""Index command."""

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.table import Table

from ...answer.router import create_router
from ...config import AppConfig
from ...search.documents import NODE_TYPE_PROPERTY

logger = logging.getLogger(__name__)
console = Console()


@click.command()
@click.option("--rebuild", is_flag=True, help="Reload API files before building")
@click.pass_obj
def index(config: AppConfig, rebuild: bool) -> None:
    """Build the search index and print its statistics."""
    try:
        router = create_router(config)
        searcher = router.searcher
        if rebuild:
            router.store.reset()

        spec_files = router.store.load_spec_files()
        search_index = asyncio.run(searcher.get_index())

        property_nodes = sum(
            1 for node in search_index.nodes if node.node_type == NODE_TYPE_PROPERTY
        )

        table = Table(title=f"Search Index: {config.api_dir}", show_header=True, header_style="bold magenta")
        table.add_column("Statistic", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("API files", str(len(spec_files)))
        table.add_row("Operations", str(search_index.operation_count))
        table.add_row("Property nodes", str(property_nodes))
        table.add_row("Terms", str(len(search_index.idf)))
        table.add_row("Average length", f"{search_index.average_document_length:.2f}")

        metrics = searcher.metrics.get_metrics()
        table.add_row("Build time (ms)", f"{metrics['avg_index_latency_ms']:.1f}")
        console.print(table)

    except Exception as e:
        logger.error(f"Indexing failed: {e}")
        console.print(f"[red]Error:[/red] {str(e)}")
        sys.exit(1)
