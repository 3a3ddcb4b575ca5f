"""Memory store facade"""
import asyncio
import logging
from typing import AsyncIterator, Awaitable, List, Optional, TypeVar

from .backends.base import COLLECTION_FIELD, FetchStatus, MemoryBackend
from .config import MemoryStoreSettings
from .exceptions import BackendUnavailable
from .keys import normalize_key
from .records import MemoryRecord, ScoredMatch
from .scanner import CollectionScanner
from .schemas import StoredRecord
from .search import NearestNeighborSearch

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MemoryStore:
    """
    Keyed embedding store partitioned into collections.

    All key-bearing calls normalize the key before reaching the backend.
    Backend calls are bounded by ``settings.request_timeout``; a timeout is
    reported as BackendUnavailable.
    """

    def __init__(
        self,
        backend: MemoryBackend,
        settings: Optional[MemoryStoreSettings] = None
    ):
        self.backend = backend
        self.settings = settings or MemoryStoreSettings()
        self.searcher = NearestNeighborSearch(CollectionScanner(backend))

    async def _call(self, awaitable: Awaitable[T], action: str) -> T:
        timeout = self.settings.request_timeout or None
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise BackendUnavailable(f"{action} timed out after {timeout}s") from e

    async def get(self, collection: str, key: str) -> Optional[MemoryRecord]:
        """
        Get a record by key

        Returns None when the record does not exist. Backend failures are
        logged and also returned as None, unless ``strict_reads`` is set.
        """
        normalized = normalize_key(key)
        try:
            result = await self._call(
                self.backend.fetch_by_id(collection, normalized),
                f"get {collection}/{normalized}"
            )
        except BackendUnavailable as e:
            if self.settings.strict_reads:
                raise
            logger.warning(f"Failed to get item {key} from collection {collection}: {e}")
            return None

        if result.status is FetchStatus.NOT_FOUND:
            logger.debug(f"Item {key} not found in collection {collection}")
            return None

        if not result.success:
            message = (
                f"Failed to get item {key} from collection {collection} "
                f"with status {result.status.value} {result.detail}".rstrip()
            )
            if self.settings.strict_reads:
                raise BackendUnavailable(message)
            logger.warning(message)
            return None

        return result.record.to_record()

    async def put(self, collection: str, record: MemoryRecord) -> MemoryRecord:
        """Upsert a record into collection (full replace) and return it unchanged"""
        stored = StoredRecord.from_record(collection, record)
        await self._call(self.backend.upsert(stored), f"put {collection}/{stored.id}")
        return record

    async def delete(self, collection: str, key: str) -> None:
        """Delete a record; absent keys are ignored"""
        normalized = normalize_key(key)
        await self._call(
            self.backend.delete_by_id(collection, normalized),
            f"delete {collection}/{normalized}"
        )

    async def list_collections(self) -> AsyncIterator[str]:
        """Yield every collection that currently holds at least one record"""
        collections = await self._call(
            self.backend.query_distinct(COLLECTION_FIELD),
            "list collections"
        )
        for collection in collections:
            yield collection

    async def search(
        self,
        collection: str,
        query,
        k: int = 1,
        min_score: float = 0.0
    ) -> List[ScoredMatch]:
        """Top-k records of collection by cosine similarity to query"""
        return await self._call(
            self.searcher.search(collection, query, k, min_score),
            f"search {collection}"
        )

    async def get_nearest_match(
        self,
        collection: str,
        query,
        min_score: float = 0.0
    ) -> Optional[ScoredMatch]:
        """Best match in collection, or None"""
        return await self._call(
            self.searcher.nearest(collection, query, min_score),
            f"search {collection}"
        )
