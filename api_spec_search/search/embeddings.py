"""Deterministic hashed embeddings.

Each token is hashed with 32-bit FNV-1a and adds a signed weight to one bucket
of a fixed-width vector. No model and no network access is involved, so the
same tokens always produce the same vector.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np

logger = logging.getLogger(__name__)

EMBEDDING_DIMENSION = 256

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
_UINT32_MASK = 0xFFFFFFFF


@dataclass(frozen=True, eq=False)
class EmbeddingVector:
    """Embedding values with their precomputed Euclidean norm."""

    values: np.ndarray
    norm: float


def _utf16_code_units(value: str) -> List[int]:
    data = value.encode("utf-16-le", "surrogatepass")
    return [data[i] | (data[i + 1] << 8) for i in range(0, len(data), 2)]


def fnv1a_32(value: str) -> int:
    """32-bit FNV-1a hash over the UTF-16 code units of a string.

    Args:
        value: String to hash

    Returns:
        Unsigned 32-bit hash
    """
    hash_value = FNV_OFFSET_BASIS
    for unit in _utf16_code_units(value):
        hash_value ^= unit
        hash_value = (hash_value * FNV_PRIME) & _UINT32_MASK
    return hash_value


def create_embedding(
    tokens: Iterable[str], dimension: int = EMBEDDING_DIMENSION
) -> Optional[EmbeddingVector]:
    """Hash tokens into a fixed-width vector.

    Bucket is ``hash % dimension``; the sign is positive for even hashes; the
    magnitude is ``1 + ((hash >> 1) & 7) / 8``. Colliding tokens add up.

    Args:
        tokens: Tokens to embed
        dimension: Vector width

    Returns:
        Embedding, or None when there are no tokens
    """
    tokens = list(tokens)
    if not tokens:
        return None

    values = np.zeros(dimension, dtype=np.float32)
    for token in tokens:
        hash_value = fnv1a_32(token)
        index = hash_value % dimension
        sign = 1.0 if hash_value & 1 == 0 else -1.0
        magnitude = 1.0 + ((hash_value >> 1) & 0x7) / 8
        values[index] += np.float32(sign * magnitude)

    wide = values.astype(np.float64)
    norm = math.sqrt(float(np.dot(wide, wide)))
    return EmbeddingVector(values=values, norm=norm)


def cosine_similarity(a: EmbeddingVector, b: EmbeddingVector) -> float:
    """Cosine similarity over the overlapping prefix of two embeddings.

    Returns 0 when either norm is 0.
    """
    if a.norm == 0 or b.norm == 0:
        return 0.0

    length = min(len(a.values), len(b.values))
    dot = float(
        np.dot(
            a.values[:length].astype(np.float64),
            b.values[:length].astype(np.float64),
        )
    )
    return dot / (a.norm * b.norm)


__all__ = [
    "EMBEDDING_DIMENSION",
    "EmbeddingVector",
    "cosine_similarity",
    "create_embedding",
    "fnv1a_32",
]
