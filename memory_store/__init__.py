"""Memory Store - keyed embedding storage with exact nearest-neighbour search"""
__version__ = "0.1.0"

from .config import MemoryStoreSettings

from .exceptions import (
    MemoryStoreError,
    DimensionMismatch,
    BackendUnavailable,
    MalformedRecord,
)

from .keys import normalize_key
from .similarity import cosine_similarity
from .topk import BoundedTopK

from .records import (
    Embedding,
    MemoryRecord,
    ScoredMatch,
    as_embedding,
)

from .schemas import StoredRecord

from .backends import (
    FetchResult,
    FetchStatus,
    MemoryBackend,
    InMemoryBackend,
    SqlAlchemyBackend,
)

from .scanner import CollectionScanner
from .search import NearestNeighborSearch
from .store import MemoryStore

__all__ = [
    # Config
    "MemoryStoreSettings",
    # Errors
    "MemoryStoreError",
    "DimensionMismatch",
    "BackendUnavailable",
    "MalformedRecord",
    # Core
    "normalize_key",
    "cosine_similarity",
    "BoundedTopK",
    # Records
    "Embedding",
    "MemoryRecord",
    "ScoredMatch",
    "as_embedding",
    "StoredRecord",
    # Backends
    "FetchResult",
    "FetchStatus",
    "MemoryBackend",
    "InMemoryBackend",
    "SqlAlchemyBackend",
    # Search
    "CollectionScanner",
    "NearestNeighborSearch",
    "MemoryStore",
]
