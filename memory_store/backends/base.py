"""Backend contract for the memory store"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, List, Optional

from ..schemas import StoredRecord

# Queryable fields of a stored record
COLLECTION_FIELD = "collection_id"
ID_FIELD = "id"
KEY_FIELD = "key"
QUERYABLE_FIELDS = (COLLECTION_FIELD, ID_FIELD, KEY_FIELD)


def check_field(field_name: str) -> str:
    """Validate a field name passed to a query method"""
    if field_name not in QUERYABLE_FIELDS:
        raise ValueError(f"Unknown record field: {field_name}")
    return field_name


class FetchStatus(str, Enum):
    """Outcome of a point read"""
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class FetchResult:
    """Result of ``fetch_by_id``: the record on success, a status otherwise"""
    status: FetchStatus
    record: Optional[StoredRecord] = None
    detail: str = ""

    @property
    def success(self) -> bool:
        return self.status is FetchStatus.FOUND and self.record is not None

    @classmethod
    def found(cls, record: StoredRecord) -> "FetchResult":
        return cls(FetchStatus.FOUND, record)

    @classmethod
    def not_found(cls) -> "FetchResult":
        return cls(FetchStatus.NOT_FOUND)

    @classmethod
    def error(cls, detail: str) -> "FetchResult":
        return cls(FetchStatus.ERROR, detail=detail)


class MemoryBackend(ABC):
    """
    Persistent key-value store holding memory records.

    Records are addressed by ``(collection_id, id)`` where ``id`` is already
    normalized. Transport failures are raised as BackendUnavailable.
    """

    @abstractmethod
    async def fetch_by_id(self, collection: str, normalized_id: str) -> FetchResult:
        """Read a single record"""
        pass

    @abstractmethod
    async def upsert(self, record: StoredRecord) -> None:
        """Insert or fully replace a record"""
        pass

    @abstractmethod
    async def delete_by_id(self, collection: str, normalized_id: str) -> None:
        """Delete a record; deleting an absent record is a no-op"""
        pass

    @abstractmethod
    async def query_distinct(self, field_name: str) -> List[str]:
        """Distinct values of a field across all records"""
        pass

    @abstractmethod
    def query_by_field(self, field_name: str, value: str) -> AsyncIterator[StoredRecord]:
        """Stream every record whose field equals value"""
        pass
