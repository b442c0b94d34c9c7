"""Tests for BM25 scoring, method bias and fusion."""

import math

import pytest

from api_spec_search.config import EmbeddingSettings
from api_spec_search.search.documents import NODE_TYPE_OPERATION, create_search_node
from api_spec_search.search.embeddings import create_embedding
from api_spec_search.search.index import SearchIndex
from api_spec_search.search.scoring import (
    METHOD_HINT_WEIGHT,
    compute_bm25_score,
    compute_method_bias,
    score_node,
    score_nodes,
)
from api_spec_search.search.synonyms import QueryContext

DISABLED = EmbeddingSettings(enabled=False)


def context_of(*terms):
    context = QueryContext()
    for term in terms:
        context.add(term)
    return context


@pytest.fixture
def post_node(catalog):
    record = catalog.operations[1]
    return create_search_node("op", NODE_TYPE_OPERATION, record, ["todo", "list"])


def test_bm25_single_term(post_node):
    index = SearchIndex(nodes=[post_node], idf={"todo": 1.0}, document_count=1, average_document_length=2.0)

    score = compute_bm25_score(post_node, {"todo": 1}, index)

    # tf=1 and L == avgL reduce the document weight to 1
    assert score == pytest.approx(1 + math.log(2))


def test_bm25_query_weight_grows_with_frequency(post_node):
    index = SearchIndex(nodes=[post_node], idf={"todo": 1.0}, document_count=1, average_document_length=2.0)

    once = compute_bm25_score(post_node, {"todo": 1}, index)
    twice = compute_bm25_score(post_node, {"todo": 2}, index)

    assert twice / once == pytest.approx((1 + math.log(3)) / (1 + math.log(2)))


def test_bm25_unseen_term_uses_fallback_idf(post_node):
    index = SearchIndex(nodes=[post_node], idf={}, document_count=1, average_document_length=2.0)

    score = compute_bm25_score(post_node, {"list": 1}, index)

    assert score == pytest.approx((math.log(2) + 1) * (1 + math.log(2)))


def test_bm25_zero_average_length(post_node):
    index = SearchIndex(nodes=[post_node], idf={"todo": 1.0}, average_document_length=0.0)
    assert compute_bm25_score(post_node, {"todo": 1}, index) == 0.0


def test_bm25_ignores_absent_terms(post_node):
    index = SearchIndex(nodes=[post_node], idf={"todo": 1.0}, average_document_length=2.0)
    assert compute_bm25_score(post_node, {"title": 3}, index) == 0.0


@pytest.mark.parametrize(
    "method,terms,expected",
    [
        ("POST", {"create"}, METHOD_HINT_WEIGHT),
        ("post", {"作成"}, METHOD_HINT_WEIGHT),
        ("GET", {"create"}, 0.0),
        ("GET", {"list"}, METHOD_HINT_WEIGHT),
        ("GET", {"status"}, METHOD_HINT_WEIGHT),
        ("PATCH", {"update"}, METHOD_HINT_WEIGHT),
        ("PUT", {"modify", "edit"}, METHOD_HINT_WEIGHT),
        ("DELETE", {"remove"}, METHOD_HINT_WEIGHT),
        ("HEAD", {"get"}, 0.0),
    ],
)
def test_method_bias(method, terms, expected):
    assert compute_method_bias(method, frozenset(terms)) == expected


def test_score_without_embeddings_adds_bias(post_node):
    index = SearchIndex(nodes=[post_node], idf={"todo": 1.0}, document_count=1, average_document_length=2.0)
    context = context_of("todo", "create")

    score = score_node(post_node, context, index, DISABLED)

    assert score == pytest.approx(1 + math.log(2) + METHOD_HINT_WEIGHT)


def test_fusion_replaces_biased_score(post_node):
    index = SearchIndex(nodes=[post_node], idf={"todo": 1.0}, document_count=1, average_document_length=2.0)
    context = context_of("todo", "create")
    settings = EmbeddingSettings(enabled=True, weight=0.4)
    query_embedding = create_embedding(post_node.tokens)

    score = score_node(post_node, context, index, settings, query_embedding)

    bm25 = 1 + math.log(2)
    assert score == pytest.approx(bm25 * 0.6 + 1.0 * 0.4)


def test_fusion_needs_query_embedding(post_node):
    index = SearchIndex(nodes=[post_node], idf={"todo": 1.0}, document_count=1, average_document_length=2.0)
    settings = EmbeddingSettings(enabled=True, weight=0.4)

    score = score_node(post_node, context_of("todo"), index, settings, None)

    assert score == pytest.approx(1 + math.log(2))


def test_score_nodes_keeps_index_order(catalog):
    nodes = [
        create_search_node(f"n{i}", NODE_TYPE_OPERATION, record, ["todo"])
        for i, record in enumerate(catalog.operations)
    ]
    index = SearchIndex(nodes=nodes, idf={"todo": 1.0}, document_count=4, average_document_length=1.0)

    scored = score_nodes(index, context_of("todo"), DISABLED)

    assert [item.node.id for item in scored] == ["n0", "n1", "n2", "n3"]
    assert len({item.score for item in scored}) == 1
