"""Tests for nearest-neighbour search"""
import asyncio

import numpy as np
import pytest

from memory_store import (
    CollectionScanner,
    DimensionMismatch,
    InMemoryBackend,
    MemoryRecord,
    NearestNeighborSearch,
    StoredRecord,
)
from memory_store.schemas import serialize_embedding


def _searcher(backend):
    return NearestNeighborSearch(CollectionScanner(backend))


async def _put(backend, collection, key, vector, metadata=""):
    record = MemoryRecord(key=key, collection=collection, embedding=vector, metadata=metadata)
    await backend.upsert(StoredRecord.from_record(collection, record))


@pytest.mark.asyncio
async def test_end_to_end_example(populated_store, backend):
    """A and D pass the threshold, B (score 0.0) does not"""
    searcher = _searcher(backend)

    matches = await searcher.search("C", [1.0, 0.0], k=2, min_score=0.5)

    assert [m.key for m in matches] == ["A", "D"]
    assert matches[0].score == pytest.approx(1.0)
    assert matches[1].score == pytest.approx(0.9 / np.sqrt(0.82), abs=1e-6)
    assert matches[1].score == pytest.approx(0.994, abs=1e-3)


@pytest.mark.asyncio
async def test_zero_k_returns_without_scanning(populated_store, backend):
    searcher = _searcher(backend)

    assert await searcher.search("C", [1.0, 0.0], k=0) == []
    assert await searcher.search("C", [1.0, 0.0], k=-5) == []
    assert backend.scan_calls == 0


@pytest.mark.asyncio
async def test_empty_collection(populated_store, backend):
    searcher = _searcher(backend)
    assert await searcher.search("missing", [1.0, 0.0], k=3) == []
    assert backend.scan_calls == 1


@pytest.mark.asyncio
async def test_results_limited_to_k_and_sorted(backend):
    rng = np.random.default_rng(42)
    vectors = rng.normal(size=(100, 8)).astype(np.float32)
    for i, vector in enumerate(vectors):
        await _put(backend, "bulk", f"doc-{i}", vector)
    query = rng.normal(size=8).astype(np.float32)

    matches = await _searcher(backend).search("bulk", query, k=5, min_score=-1.0)

    assert len(matches) == 5
    scores = [m.score for m in matches]
    assert scores == sorted(scores, reverse=True)

    # Brute-force reference
    wide = vectors.astype(np.float64)
    normed = wide / np.linalg.norm(wide, axis=1, keepdims=True)
    wide_query = query.astype(np.float64)
    reference = normed @ (wide_query / np.linalg.norm(wide_query))
    expected = [f"doc-{i}" for i in np.argsort(-reference)[:5]]
    assert [m.key for m in matches] == expected


@pytest.mark.asyncio
async def test_default_threshold_drops_negative_scores(backend):
    await _put(backend, "c", "same", [1.0, 0.0])
    await _put(backend, "c", "opposite", [-1.0, 0.0])

    matches = await _searcher(backend).search("c", [1.0, 0.0], k=10)

    assert [m.key for m in matches] == ["same"]


@pytest.mark.asyncio
async def test_equal_scores_keep_first_seen(backend):
    for key in ("first", "second", "third"):
        await _put(backend, "c", key, [2.0, 2.0])

    matches = await _searcher(backend).search("c", [1.0, 1.0], k=2)

    assert [m.key for m in matches] == ["first", "second"]


@pytest.mark.asyncio
async def test_records_without_embedding_are_skipped(backend, caplog):
    await _put(backend, "c", "good", [1.0, 0.0])
    await backend.upsert(StoredRecord(
        collection_id="c", id="BROKEN", key="broken", embedding="not json"
    ))
    await backend.upsert(StoredRecord(
        collection_id="c", id="PENDING", key="pending", embedding='{"embedding": null}'
    ))

    with caplog.at_level("WARNING"):
        matches = await _searcher(backend).search("c", [1.0, 0.0], k=3)

    assert [m.key for m in matches] == ["good"]
    assert "Skipped 2 record(s)" in caplog.text


@pytest.mark.asyncio
async def test_out_of_range_vector_is_skipped(backend):
    """A stored integer too large for a float does not abort the scan"""
    await _put(backend, "c", "good", [1.0, 0.0])
    await backend.upsert(StoredRecord(
        collection_id="c",
        id="BAD",
        key="bad",
        embedding='{"embedding": {"vector": [' + "1" + "0" * 400 + ', 0]}}',
    ))

    matches = await _searcher(backend).search("c", [1.0, 0.0], k=3)

    assert [m.key for m in matches] == ["good"]


@pytest.mark.asyncio
async def test_dimension_mismatch_aborts_search(backend):
    await _put(backend, "c", "ok", [1.0, 0.0])
    await _put(backend, "c", "wide", [1.0, 0.0, 0.0])

    with pytest.raises(DimensionMismatch):
        await _searcher(backend).search("c", [1.0, 0.0], k=5)


@pytest.mark.asyncio
async def test_other_collections_are_not_scanned(backend):
    await _put(backend, "a", "x", [1.0, 0.0])
    await _put(backend, "b", "y", [1.0, 0.0])

    matches = await _searcher(backend).search("a", [1.0, 0.0], k=5)

    assert [m.record.collection for m in matches] == ["a"]


@pytest.mark.asyncio
async def test_zero_query_scores_zero(backend):
    await _put(backend, "c", "x", [1.0, 0.0])

    matches = await _searcher(backend).search("c", [0.0, 0.0], k=1)

    assert len(matches) == 1
    assert matches[0].score == 0.0
    assert await _searcher(backend).search("c", [0.0, 0.0], k=1, min_score=0.1) == []


@pytest.mark.asyncio
async def test_nearest(populated_store, backend):
    searcher = _searcher(backend)

    best = await searcher.nearest("C", [0.1, 1.0])
    assert best.key == "B"

    assert await searcher.nearest("C", [0.0, 1.0], min_score=1.1) is None


@pytest.mark.asyncio
async def test_metadata_travels_with_match(backend):
    await _put(backend, "c", "x", [0.3, 0.4], metadata='{"text": "hello"}')

    [match] = await _searcher(backend).search("c", [0.3, 0.4], k=1)

    assert match.record.metadata == '{"text": "hello"}'
    assert np.array_equal(match.record.embedding, np.array([0.3, 0.4], dtype=np.float32))


class EndlessBackend(InMemoryBackend):
    """Backend whose collection stream never ends"""

    def __init__(self):
        super().__init__()
        self.yielded = 0
        self.closed = False
        self.payload = serialize_embedding([1.0, 0.0])

    async def query_by_field(self, field_name, value):
        try:
            while True:
                await asyncio.sleep(0)
                self.yielded += 1
                yield StoredRecord(
                    collection_id=value,
                    id=f"ID{self.yielded}",
                    key=f"id{self.yielded}",
                    embedding=self.payload,
                )
        finally:
            self.closed = True


@pytest.mark.asyncio
async def test_cancellation_stops_consuming_stream():
    backend = EndlessBackend()
    task = asyncio.create_task(_searcher(backend).search("c", [1.0, 0.0], k=3))

    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    consumed = backend.yielded
    assert backend.closed is True
    await asyncio.sleep(0.01)
    assert backend.yielded == consumed


@pytest.mark.asyncio
async def test_failure_mid_scan_closes_stream():
    backend = EndlessBackend()
    backend.payload = serialize_embedding([1.0, 0.0, 0.0])

    with pytest.raises(DimensionMismatch):
        await _searcher(backend).search("c", [1.0, 0.0], k=3)

    assert backend.closed is True
    assert backend.yielded == 1
