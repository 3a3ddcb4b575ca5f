"""Backend implementations"""
from .base import (
    COLLECTION_FIELD,
    FetchResult,
    FetchStatus,
    MemoryBackend,
)
from .memory import InMemoryBackend
from .sql import SqlAlchemyBackend

__all__ = [
    "COLLECTION_FIELD",
    "FetchResult",
    "FetchStatus",
    "MemoryBackend",
    "InMemoryBackend",
    "SqlAlchemyBackend",
]
