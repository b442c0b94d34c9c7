"""
API Spec Search - Deterministic Hybrid Search for OpenAPI Operations

This package answers natural-language and direct method+path questions against
a directory of OpenAPI/Swagger documents. Natural-language queries are ranked by
a deterministic hybrid engine; direct questions are answered from the document.

Key Features:
- CJK-aware tokenization with camelCase splitting and synonym expansion
- Property-level indexing of request and response schemas
- BM25 scoring with optional fusion of hashed embeddings
- Stable ordering and tie-breaking of ranked candidates
- Lazily built, shared, invalidatable in-memory index
- Deterministic answer composer with optional LLM reformatting

Version: 1.0.0
License: MIT
"""

import logging
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("api-spec-search")
except PackageNotFoundError:
    __version__ = "0.0.0"

logger = logging.getLogger(__name__)

__all__ = ["__version__"]
