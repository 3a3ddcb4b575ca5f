"""Exceptions raised by the memory store"""


class MemoryStoreError(Exception):
    """Base exception for all memory store errors."""
    pass


class DimensionMismatch(MemoryStoreError, ValueError):
    """Two embeddings of different length were compared."""

    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(f"Embedding dimensions differ: {left} != {right}")


class BackendUnavailable(MemoryStoreError):
    """The backing store failed, timed out or could not be reached."""
    pass


class MalformedRecord(MemoryStoreError, ValueError):
    """A stored record carries a missing or corrupt embedding payload."""
    pass
