"""Exception types raised by API Spec Search."""

from typing import Any, Dict, Optional


class SearchError(Exception):
    """Base exception for API Spec Search."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.details = details or {}


class SpecLoadError(SearchError):
    """An API description file could not be parsed."""

    pass


class IndexBuildError(SearchError):
    """The search index could not be built."""

    pass


__all__ = ["SearchError", "SpecLoadError", "IndexBuildError"]
