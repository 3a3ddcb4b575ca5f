"""Record types handled by the memory store"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Union

import numpy as np

# Embeddings are stored as one-dimensional float32 arrays
Embedding = np.ndarray
EMBEDDING_DTYPE = np.float32


def as_embedding(values: Union[Sequence[float], np.ndarray]) -> Embedding:
    """
    Convert a numeric sequence into an embedding array

    Raises:
        ValueError: If the input is not one-dimensional, has non-finite values
            or holds integers too large for a float
    """
    try:
        vector = np.asarray(values, dtype=EMBEDDING_DTYPE)
    except OverflowError as e:
        raise ValueError(f"Embedding value out of range: {e}") from e
    if vector.ndim != 1:
        raise ValueError(f"Embedding must be one-dimensional, got shape {vector.shape}")
    if not np.all(np.isfinite(vector)):
        raise ValueError("Embedding contains non-finite values")
    return vector


@dataclass(eq=False)
class MemoryRecord:
    """A keyed embedding with its metadata inside one collection."""

    key: str
    """Key as written by the caller (normalized only when addressing the backend)"""

    collection: str
    """Collection the record belongs to"""

    embedding: Optional[Embedding]
    """Embedding vector; None when the record has not been embedded or is corrupt"""

    metadata: str = ""
    """Opaque serialized metadata"""

    timestamp: Optional[datetime] = None
    """Record timestamp, stored verbatim"""

    def __post_init__(self):
        if self.embedding is not None:
            self.embedding = as_embedding(self.embedding)


@dataclass(eq=False)
class ScoredMatch:
    """A search hit: the matched record and its cosine similarity."""

    record: MemoryRecord
    score: float

    @property
    def key(self) -> str:
        return self.record.key
