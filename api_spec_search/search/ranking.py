"""Collapse scored nodes into ranked operation candidates."""

import logging
from typing import Dict, List, Sequence, Tuple

from .documents import NODE_TYPE_OPERATION, NODE_TYPE_PROPERTY
from .scoring import ScoredNode
from .search_models import SearchCandidate

logger = logging.getLogger(__name__)


def _candidate_from(scored: ScoredNode) -> SearchCandidate:
    node = scored.node
    return SearchCandidate(
        method=node.operation.method,
        path=node.operation.path,
        summary=node.summary,
        score=scored.score,
        spec_name=node.spec_name,
        source_type=node.node_type,
        matched_property_path=node.matched_property_path,
    )


def _replaces(candidate: SearchCandidate, existing: SearchCandidate) -> bool:
    if candidate.score > existing.score:
        return True
    # On a tie a property match takes over from an operation match
    return (
        candidate.score == existing.score
        and existing.source_type == NODE_TYPE_OPERATION
        and candidate.source_type == NODE_TYPE_PROPERTY
    )


def sort_key(candidate: SearchCandidate) -> Tuple[float, str, str]:
    """Score descending, then path and method ascending."""
    return (-candidate.score, candidate.path, candidate.method)


def rank_candidates(
    scored_nodes: Sequence[ScoredNode],
    threshold: float,
    top_k: int,
) -> List[SearchCandidate]:
    """Best match per operation, thresholded, sorted and truncated.

    Args:
        scored_nodes: Scored nodes in index order
        threshold: Minimum score to keep a candidate
        top_k: Maximum number of candidates

    Returns:
        Ranked candidates
    """
    best: Dict[Tuple[str, str], SearchCandidate] = {}

    for scored in scored_nodes:
        if scored.score < threshold:
            continue
        candidate = _candidate_from(scored)
        key = scored.node.operation.key
        existing = best.get(key)
        if existing is None or _replaces(candidate, existing):
            best[key] = candidate

    ranked = sorted(best.values(), key=sort_key)
    logger.debug(f"{len(ranked)} operation(s) cleared threshold {threshold}")
    return ranked[: max(1, top_k)]


__all__ = ["rank_candidates", "sort_key"]
