"""In-memory backend, used for tests and local development"""
import asyncio
from typing import AsyncIterator, Dict, List, Tuple

from ..schemas import StoredRecord
from .base import FetchResult, MemoryBackend, check_field


class InMemoryBackend(MemoryBackend):
    """Dictionary-backed store keyed by (collection_id, id)."""

    def __init__(self):
        self._records: Dict[Tuple[str, str], StoredRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def fetch_by_id(self, collection: str, normalized_id: str) -> FetchResult:
        record = self._records.get((collection, normalized_id))
        if record is None:
            return FetchResult.not_found()
        return FetchResult.found(record)

    async def upsert(self, record: StoredRecord) -> None:
        self._records[(record.collection_id, record.id)] = record

    async def delete_by_id(self, collection: str, normalized_id: str) -> None:
        self._records.pop((collection, normalized_id), None)

    async def query_distinct(self, field_name: str) -> List[str]:
        check_field(field_name)
        return list(dict.fromkeys(getattr(r, field_name) for r in self._records.values()))

    async def query_by_field(self, field_name: str, value: str) -> AsyncIterator[StoredRecord]:
        check_field(field_name)
        # Snapshot so concurrent writes don't break iteration
        matches = [r for r in self._records.values() if getattr(r, field_name) == value]
        for record in matches:
            # Yield to the loop per record so a cancelled scan stops here
            await asyncio.sleep(0)
            yield record
