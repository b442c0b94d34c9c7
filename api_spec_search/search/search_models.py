"""Search result data structures."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SearchCandidate:
    """One ranked operation with the provenance of its best match."""

    method: str
    path: str
    summary: Optional[str]
    score: float
    spec_name: str
    source_type: str
    matched_property_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for serialization."""
        return asdict(self)


__all__ = ["SearchCandidate"]
