"""CLI commands package."""

from .ask import ask
from .index import index
from .query import query
from .search import search

__all__ = ["ask", "index", "query", "search"]
