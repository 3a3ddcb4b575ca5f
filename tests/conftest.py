"""Pytest configuration and fixtures for memory store tests"""
import pytest
import pytest_asyncio

from memory_store import InMemoryBackend, MemoryRecord, MemoryStore


class CountingBackend(InMemoryBackend):
    """In-memory backend that counts collection scans"""

    def __init__(self):
        super().__init__()
        self.scan_calls = 0

    def query_by_field(self, field_name, value):
        self.scan_calls += 1
        return super().query_by_field(field_name, value)


@pytest.fixture
def backend():
    """Empty in-memory backend"""
    return CountingBackend()


@pytest.fixture
def store(backend):
    """Memory store over the in-memory backend"""
    return MemoryStore(backend)


@pytest_asyncio.fixture
async def populated_store(store):
    """Collection "C" holding A=[1,0], B=[0,1], D=[0.9,0.1]"""
    for key, vector in (("A", [1.0, 0.0]), ("B", [0.0, 1.0]), ("D", [0.9, 0.1])):
        await store.put("C", MemoryRecord(key=key, collection="C", embedding=vector))
    return store
