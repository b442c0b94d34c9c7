"""
Hybrid Search Package for API Spec Search

This package ranks catalogued API operations for natural-language queries.
Everything is local and deterministic: identical queries over identical files
return identical candidates, scores and ordering.

Key Components:
1. Tokenizer and Synonyms:
   - Unicode normalization and camelCase splitting
   - CJK runs and character n-grams
   - Symmetric synonym expansion

2. Documents and Properties:
   - One node per operation
   - One node per schema property path
   - Cycle-safe schema traversal

3. Index and Scoring:
   - Document frequencies and IDF
   - BM25 with method bias
   - Optional hashed-embedding fusion

4. Ranking:
   - Best node per operation
   - Threshold, stable ordering, top-K

Example Usage:
    from api_spec_search.search import create_searcher

    searcher = create_searcher()
    candidates = await searcher.search("create a todo")
    for candidate in candidates:
        print(candidate.method, candidate.path, candidate.score)
"""

from .index import IndexCache, SearchIndex, build_search_index
from .search_models import SearchCandidate
from .searcher import OperationSearcher, create_searcher
from .tokenizer import tokenize

__all__ = [
    "IndexCache",
    "OperationSearcher",
    "SearchCandidate",
    "SearchIndex",
    "build_search_index",
    "create_searcher",
    "tokenize",
]
