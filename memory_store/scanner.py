"""Collection scanning"""
import logging
from contextlib import aclosing
from typing import AsyncIterator

from .backends.base import COLLECTION_FIELD, MemoryBackend
from .exceptions import MalformedRecord
from .records import MemoryRecord

logger = logging.getLogger(__name__)


class CollectionScanner:
    """Streams every record of a collection from the backend"""

    def __init__(self, backend: MemoryBackend):
        self.backend = backend

    async def scan(self, collection: str) -> AsyncIterator[MemoryRecord]:
        """
        Yield each record of the collection, decoded.

        A record with a corrupt embedding payload is yielded with
        ``embedding=None`` rather than failing the scan.
        """
        async with aclosing(self.backend.query_by_field(COLLECTION_FIELD, collection)) as rows:
            async for stored in rows:
                try:
                    yield stored.to_record(strict=True)
                except MalformedRecord as e:
                    logger.debug(f"Malformed record {stored.key!r} in {collection}: {e}")
                    yield stored.to_record()
