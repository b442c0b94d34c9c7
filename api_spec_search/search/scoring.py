"""BM25 scoring, method bias and embedding fusion."""

import logging
import math
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from ..config import EmbeddingSettings
from .documents import SearchNode
from .embeddings import EmbeddingVector, cosine_similarity
from .index import SearchIndex
from .synonyms import (
    CREATE_SYNONYMS,
    DELETE_SYNONYMS,
    LIST_SYNONYMS,
    RETRIEVE_SYNONYMS,
    STATUS_SYNONYMS,
    UPDATE_SYNONYMS,
    QueryContext,
)
from .tokenizer import normalize_term

logger = logging.getLogger(__name__)

BM25_K1 = 1.5
BM25_B = 0.75

METHOD_HINT_WEIGHT = 0.5


def _hint_set(*groups: List[str]) -> FrozenSet[str]:
    return frozenset(normalize_term(term) for group in groups for term in group)


METHOD_HINTS: Dict[str, FrozenSet[str]] = {
    "POST": _hint_set(CREATE_SYNONYMS),
    "PUT": _hint_set(UPDATE_SYNONYMS),
    "PATCH": _hint_set(UPDATE_SYNONYMS),
    "DELETE": _hint_set(DELETE_SYNONYMS),
    "GET": _hint_set(RETRIEVE_SYNONYMS, LIST_SYNONYMS, STATUS_SYNONYMS),
}


@dataclass
class ScoredNode:
    node: SearchNode
    score: float


def compute_bm25_score(
    node: SearchNode,
    query_frequency: Dict[str, int],
    index: SearchIndex,
) -> float:
    """BM25 score of a node for a weighted query.

    Query terms are visited in first-seen order so the floating-point sum is
    reproducible. Query weight is ``1 + ln(1 + frequency)``.

    Args:
        node: Node to score
        query_frequency: Weighted query terms
        index: Index providing IDF and average length

    Returns:
        Score, 0 for empty nodes or an empty corpus
    """
    if node.length == 0 or index.average_document_length == 0:
        return 0.0

    length_ratio = node.length / index.average_document_length
    score = 0.0

    for token, query_count in query_frequency.items():
        term_count = node.term_frequency.get(token)
        if not term_count:
            continue

        idf = index.idf.get(token)
        if idf is None:
            idf = index.fallback_idf()
        if idf == 0:
            continue

        denominator = term_count + BM25_K1 * (1 - BM25_B + BM25_B * length_ratio)
        if denominator == 0:
            continue

        document_weight = term_count * (BM25_K1 + 1) / denominator
        query_weight = 1 + math.log(1 + query_count)
        score += document_weight * idf * query_weight

    return score


def compute_method_bias(method: str, term_set: FrozenSet[str]) -> float:
    """Fixed bonus when the query names an intent matching the HTTP method."""
    hints = METHOD_HINTS.get(method.upper())
    if hints and not hints.isdisjoint(term_set):
        return METHOD_HINT_WEIGHT
    return 0.0


def score_node(
    node: SearchNode,
    context: QueryContext,
    index: SearchIndex,
    embeddings: EmbeddingSettings,
    query_embedding: Optional[EmbeddingVector] = None,
) -> float:
    """Final score of one node.

    Without fusion the score is BM25 plus the method bias. With fusion enabled
    and both embeddings present the score is
    ``bm25 * (1 - w) + (cosine + 1) / 2 * w``, which replaces the biased score.

    Args:
        node: Node to score
        context: Expanded query
        index: Search index
        embeddings: Fusion settings
        query_embedding: Embedding of the query terms

    Returns:
        Final score
    """
    bm25 = compute_bm25_score(node, context.frequency, index)
    score = bm25 + compute_method_bias(node.operation.method, context.term_set)

    # TODO: decide whether the method bias should also be added to the fused score
    if embeddings.enabled and query_embedding is not None and node.embedding is not None:
        cosine = cosine_similarity(query_embedding, node.embedding)
        normalized_cosine = (cosine + 1) / 2
        score = bm25 * (1 - embeddings.weight) + normalized_cosine * embeddings.weight

    return score


def score_nodes(
    index: SearchIndex,
    context: QueryContext,
    embeddings: EmbeddingSettings,
    query_embedding: Optional[EmbeddingVector] = None,
) -> List[ScoredNode]:
    """Score every node of the index, in index order."""
    return [
        ScoredNode(node=node, score=score_node(node, context, index, embeddings, query_embedding))
        for node in index.nodes
    ]


__all__ = [
    "BM25_B",
    "BM25_K1",
    "METHOD_HINTS",
    "METHOD_HINT_WEIGHT",
    "ScoredNode",
    "compute_bm25_score",
    "compute_method_bias",
    "score_node",
    "score_nodes",
]
