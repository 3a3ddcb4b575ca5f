"""Exact nearest-neighbour search over a collection"""
import logging
from contextlib import aclosing
from typing import List, Optional

from .records import ScoredMatch, as_embedding
from .scanner import CollectionScanner
from .similarity import cosine_similarity
from .topk import BoundedTopK

logger = logging.getLogger(__name__)


class NearestNeighborSearch:
    """
    Brute-force top-K search by cosine similarity.

    Every search is a single pass over the whole collection: each record is
    scored against the query and offered to a private BoundedTopK, so memory
    stays O(k) whatever the collection size. There is no index; results are
    exact.
    """

    def __init__(self, scanner: CollectionScanner):
        self.scanner = scanner

    async def search(
        self,
        collection: str,
        query,
        k: int,
        min_score: float = 0.0
    ) -> List[ScoredMatch]:
        """
        Find the k records most similar to query

        Args:
            collection: Collection to scan
            query: Query embedding
            k: Maximum number of matches; k <= 0 returns [] without scanning
            min_score: Matches scoring below this are dropped

        Returns:
            Matches by descending score

        Raises:
            DimensionMismatch: If any record's embedding length differs from
                the query's
        """
        if k <= 0:
            return []

        query = as_embedding(query)
        top: BoundedTopK = BoundedTopK(k)
        scanned = 0
        skipped = 0

        async with aclosing(self.scanner.scan(collection)) as records:
            async for record in records:
                scanned += 1
                if record.embedding is None:
                    skipped += 1
                    continue
                score = cosine_similarity(query, record.embedding)
                if score < min_score:
                    continue
                top.offer(record, score)

        if skipped:
            logger.warning(f"Skipped {skipped} record(s) without a usable embedding in {collection}")
        logger.debug(f"Scanned {scanned} record(s) in {collection}, kept {len(top)}")

        return [ScoredMatch(record=record, score=score) for record, score in top.drain_sorted()]

    async def nearest(self, collection: str, query, min_score: float = 0.0) -> Optional[ScoredMatch]:
        """Single best match, or None"""
        matches = await self.search(collection, query, k=1, min_score=min_score)
        return matches[0] if matches else None
