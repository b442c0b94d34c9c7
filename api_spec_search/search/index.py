"""
Search Index for API Spec Search

This module aggregates search nodes into the statistics BM25 needs and keeps the
result in a shared, lazily built cache.

Statistics:
- Document frequency counts each distinct token once per node
- IDF is ``ln((N + 1) / (df + 1)) + 1``
- Both are computed over operation nodes only, unless there are none, in which
  case every node counts; N never drops below 1
- Average length is taken over the same nodes (0 when there are none)

Caching:
- The index is built on first use, in a worker thread
- Concurrent callers arriving before it exists await the same pending build
- ``invalidate()`` discards the cached build; builds already running are not
  aborted, but only the build started after the latest invalidation is served
  to new callers
- A build that fails is dropped so the next query retries

Example Usage:
    from api_spec_search.search.index import IndexCache, build_search_index

    cache = IndexCache(lambda: build_search_index(store.load_catalog().operations))
    index = await cache.get()
"""

import asyncio
import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from ..catalog.operations import OperationRecord
from ..exceptions import IndexBuildError, SearchError
from ..monitoring.metrics_manager import MetricsManager
from .documents import NODE_TYPE_OPERATION, SearchNode, build_operation_nodes

logger = logging.getLogger(__name__)


@dataclass
class SearchIndex:
    """Nodes and corpus statistics."""

    nodes: List[SearchNode] = field(default_factory=list)
    idf: Dict[str, float] = field(default_factory=dict)
    document_count: int = 1
    average_document_length: float = 0.0

    @property
    def operation_count(self) -> int:
        return sum(1 for node in self.nodes if node.node_type == NODE_TYPE_OPERATION)

    def fallback_idf(self) -> float:
        """IDF used for tokens that occur in no counted node."""
        return math.log(self.document_count + 1) + 1


def compute_idf(document_frequency: Dict[str, int], document_count: int) -> Dict[str, float]:
    return {
        token: math.log((document_count + 1) / (df + 1)) + 1
        for token, df in document_frequency.items()
    }


def build_index_from_nodes(nodes: Sequence[SearchNode]) -> SearchIndex:
    """Compute corpus statistics over a node collection.

    Args:
        nodes: Operation and property nodes

    Returns:
        Index holding the non-empty nodes and their statistics
    """
    nodes_with_tokens = [node for node in nodes if node.length > 0]
    operation_nodes = [node for node in nodes_with_tokens if node.node_type == NODE_TYPE_OPERATION]
    counted = operation_nodes or nodes_with_tokens

    document_frequency: Dict[str, int] = {}
    for node in counted:
        for token in dict.fromkeys(node.tokens):
            document_frequency[token] = document_frequency.get(token, 0) + 1

    document_count = len(counted) or 1
    total_length = sum(node.length for node in counted)
    average_length = total_length / document_count if counted else 0.0

    return SearchIndex(
        nodes=nodes_with_tokens,
        idf=compute_idf(document_frequency, document_count),
        document_count=document_count,
        average_document_length=average_length,
    )


def build_search_index(operations: Sequence[OperationRecord]) -> SearchIndex:
    """Build the search index for a list of operations."""
    nodes: List[SearchNode] = []
    for operation in operations:
        nodes.extend(build_operation_nodes(operation))

    index = build_index_from_nodes(nodes)
    logger.info(
        f"Built search index: {len(operations)} operations, {len(index.nodes)} nodes, "
        f"{len(index.idf)} terms"
    )
    return index


class IndexCache:
    """Shared, lazily built search index."""

    def __init__(
        self,
        builder: Callable[[], SearchIndex],
        metrics: Optional[MetricsManager] = None,
    ) -> None:
        """Initialize index cache.

        Args:
            builder: Synchronous function producing a fresh index
            metrics: Optional metrics manager
        """
        self._builder = builder
        self._metrics = metrics or MetricsManager()
        self._lock = threading.Lock()
        self._future: Optional[asyncio.Future] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of invalidations so far."""
        return self._generation

    def invalidate(self) -> None:
        """Discard the cached index; the next request rebuilds it."""
        with self._lock:
            self._future = None
            self._generation += 1
        logger.debug("Search index invalidated")

    async def get(self, force_reload: bool = False) -> SearchIndex:
        """Get the index, building it if needed.

        Args:
            force_reload: Invalidate before reading

        Returns:
            Search index

        Raises:
            IndexBuildError: If the build fails
        """
        if force_reload:
            self.invalidate()

        loop = asyncio.get_running_loop()
        with self._lock:
            future = self._future
            if (
                future is None
                or future.cancelled()
                or (future.get_loop() is not loop and not future.done())
            ):
                future = loop.run_in_executor(None, self._timed_build)
                self._future = future
                generation = self._generation
                future.add_done_callback(
                    lambda done, generation=generation: self._discard_failed(done, generation)
                )
                self._metrics.record_cache_miss()
            else:
                self._metrics.record_cache_hit()

        try:
            return await asyncio.shield(future)
        except Exception as e:
            self._metrics.record_error(e, {"component": "index"})
            if isinstance(e, SearchError):
                raise
            raise IndexBuildError(f"Failed to build search index: {e}") from e

    def _timed_build(self) -> SearchIndex:
        start = time.perf_counter()
        index = self._builder()
        self._metrics.record_index_build((time.perf_counter() - start) * 1000, len(index.nodes))
        return index

    def _discard_failed(self, future: asyncio.Future, generation: int) -> None:
        if future.cancelled() or future.exception() is None:
            return
        with self._lock:
            if self._future is future and self._generation == generation:
                self._future = None
        logger.warning(f"Search index build failed: {future.exception()}")


__all__ = [
    "IndexCache",
    "SearchIndex",
    "build_index_from_nodes",
    "build_search_index",
    "compute_idf",
]
