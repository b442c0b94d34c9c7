"""Hybrid search over catalogued API operations."""

import logging
import time
from typing import Callable, List, Optional

from ..catalog.store import SpecStore
from ..config import AppConfig
from ..monitoring.metrics_manager import MetricsManager
from .embeddings import create_embedding
from .index import IndexCache, SearchIndex, build_search_index
from .ranking import rank_candidates
from .scoring import score_nodes
from .search_models import SearchCandidate
from .synonyms import build_query_context
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[], AppConfig]


class OperationSearcher:
    """Ranks operations for natural-language queries.

    Configuration is read through ``config_loader`` on every call so threshold,
    top-K and fusion changes apply without rebuilding the index.
    """

    def __init__(
        self,
        store: SpecStore,
        config_loader: Optional[ConfigLoader] = None,
        metrics: Optional[MetricsManager] = None,
    ) -> None:
        """Initialize searcher.

        Args:
            store: Source of catalogued operations
            config_loader: Callable returning the current configuration
            metrics: Optional metrics manager
        """
        self.store = store
        self.config_loader = config_loader or AppConfig.from_env
        self.metrics = metrics or MetricsManager()
        self.index_cache = IndexCache(self._build_index, self.metrics)
        self._unsubscribe = store.on_reset(self.index_cache.invalidate)

    def _build_index(self) -> SearchIndex:
        return build_search_index(self.store.load_catalog().operations)

    async def get_index(self, force_reload: bool = False) -> SearchIndex:
        """Get the shared search index."""
        return await self.index_cache.get(force_reload=force_reload)

    async def search(self, query: str, force_reload: bool = False) -> List[SearchCandidate]:
        """Search for operations matching a query.

        Args:
            query: Free-text query
            force_reload: Reload API files and rebuild the index first

        Returns:
            Ranked candidates, empty when nothing clears the threshold
        """
        trimmed = query.strip()
        if not trimmed:
            return []

        start = time.perf_counter()
        config = self.config_loader()

        if force_reload:
            logger.info("Reloading API files before search")
            self.store.reset()

        index = await self.get_index()

        tokens = tokenize(trimmed)
        if not tokens:
            return []

        context = build_query_context(tokens)
        query_embedding = create_embedding(context.terms) if config.embeddings.enabled else None

        scored = score_nodes(index, context, config.embeddings, query_embedding)
        candidates = rank_candidates(scored, config.search.threshold, config.search.top_k)

        latency_ms = (time.perf_counter() - start) * 1000
        self.metrics.record_search(latency_ms, len(candidates))
        logger.debug(f"Search for {trimmed!r} returned {len(candidates)} candidate(s) in {latency_ms:.1f}ms")
        return candidates

    def close(self) -> None:
        """Stop listening for store resets."""
        self._unsubscribe()


def create_searcher(config: Optional[AppConfig] = None) -> OperationSearcher:
    """Create a searcher reading API files from the configured directory.

    Args:
        config: Configuration; environment variables are read per call when omitted

    Returns:
        Operation searcher
    """
    if config is None:
        store = SpecStore(AppConfig.from_env().api_dir)
        return OperationSearcher(store)
    return OperationSearcher(SpecStore(config.api_dir), config_loader=lambda: config)


__all__ = ["OperationSearcher", "create_searcher"]
