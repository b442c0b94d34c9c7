"""In-process metrics for searches and index builds."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

RECENT_ERROR_LIMIT = 5


def _average(values) -> float:
    return sum(values) / len(values) if values else 0


@dataclass
class MetricsManager:
    """Counters shared by a searcher and its index cache."""

    metrics: Dict[str, Any] = field(default_factory=dict)
    start_time: Optional[datetime] = None

    def __post_init__(self):
        self.reset()

    def reset(self):
        """Clear all counters and restart the uptime clock."""
        self.start_time = datetime.now()
        self.metrics = {
            "search_latency": [],
            "index_latency": [],
            "index_cache_hits": 0,
            "index_cache_misses": 0,
            "total_searches": 0,
            "empty_searches": 0,
            "total_index_builds": 0,
            "last_index_nodes": 0,
            "errors": [],
        }

    def record_search(self, latency_ms: float, result_count: int):
        """Record one completed search.

        Args:
            latency_ms: Latency in milliseconds
            result_count: Number of candidates returned
        """
        self.metrics["search_latency"].append(latency_ms)
        self.metrics["total_searches"] += 1
        if result_count == 0:
            self.metrics["empty_searches"] += 1

    def record_index_build(self, latency_ms: float, node_count: int):
        """Record one finished index build.

        Args:
            latency_ms: Build time in milliseconds
            node_count: Operation and property nodes in the new index
        """
        self.metrics["index_latency"].append(latency_ms)
        self.metrics["total_index_builds"] += 1
        self.metrics["last_index_nodes"] = node_count
        logger.debug(f"Index build #{self.metrics['total_index_builds']}: {node_count} nodes in {latency_ms:.1f}ms")

    def record_cache_hit(self):
        """Record a query served by an existing or in-flight index."""
        self.metrics["index_cache_hits"] += 1

    def record_cache_miss(self):
        """Record a query that started an index build."""
        self.metrics["index_cache_misses"] += 1

    def record_error(self, error: Exception, context: Optional[Dict[str, Any]] = None):
        """Record error with context.

        Args:
            error: Exception that occurred
            context: Optional context about the error
        """
        self.metrics["errors"].append({
            "error": str(error),
            "type": type(error).__name__,
            "timestamp": datetime.now().isoformat(),
            "context": context or {},
        })

    def get_metrics(self) -> Dict[str, Any]:
        """Snapshot of counters and averages."""
        return {
            "uptime_seconds": (datetime.now() - self.start_time).total_seconds(),
            "total_searches": self.metrics["total_searches"],
            "empty_searches": self.metrics["empty_searches"],
            "total_index_builds": self.metrics["total_index_builds"],
            "last_index_nodes": self.metrics["last_index_nodes"],
            "avg_search_latency_ms": _average(self.metrics["search_latency"]),
            "avg_index_latency_ms": _average(self.metrics["index_latency"]),
            "index_cache_hits": self.metrics["index_cache_hits"],
            "index_cache_misses": self.metrics["index_cache_misses"],
            "error_count": len(self.metrics["errors"]),
            "recent_errors": self.metrics["errors"][-RECENT_ERROR_LIMIT:],
        }


__all__ = ["MetricsManager"]
