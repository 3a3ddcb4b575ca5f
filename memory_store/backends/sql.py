"""SQLAlchemy backend for PostgreSQL (asyncpg)"""
import logging
from typing import AsyncIterator, List

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..exceptions import BackendUnavailable
from ..models import MemoryRecordRow
from ..schemas import StoredRecord
from .base import FetchResult, MemoryBackend, check_field

logger = logging.getLogger(__name__)

# asyncpg connection failures (refused, unreachable, timed out) surface as OSError
TRANSPORT_ERRORS = (SQLAlchemyError, OSError)

_COLUMNS = {
    "collection_id": MemoryRecordRow.collection_id,
    "id": MemoryRecordRow.id,
    "key": MemoryRecordRow.key,
}


def _to_stored(row: MemoryRecordRow) -> StoredRecord:
    return StoredRecord(
        collection_id=row.collection_id,
        id=row.id,
        key=row.key,
        embedding=row.embedding,
        metadata=row.metadata_ or "",
        timestamp=row.timestamp,
    )


class SqlAlchemyBackend(MemoryBackend):
    """Memory backend over the ``memory_records`` table"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def fetch_by_id(self, collection: str, normalized_id: str) -> FetchResult:
        try:
            async with self.session_factory() as session:
                row = await session.get(MemoryRecordRow, (collection, normalized_id))
                if row is None:
                    return FetchResult.not_found()
                return FetchResult.found(_to_stored(row))
        except TRANSPORT_ERRORS as e:
            raise BackendUnavailable(f"Failed to read {collection}/{normalized_id}: {e}") from e

    async def upsert(self, record: StoredRecord) -> None:
        values = {
            "collection_id": record.collection_id,
            "id": record.id,
            "key": record.key,
            "embedding": record.embedding,
            "metadata": record.metadata,
            "timestamp": record.timestamp,
        }
        statement = insert(MemoryRecordRow.__table__).values(**values)
        # One statement, so concurrent first writes to an id never both INSERT
        statement = statement.on_conflict_do_update(
            index_elements=["collection_id", "id"],
            set_={name: statement.excluded[name] for name in ("key", "embedding", "metadata", "timestamp")},
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(statement)
        except TRANSPORT_ERRORS as e:
            raise BackendUnavailable(f"Failed to upsert {record.collection_id}/{record.id}: {e}") from e

    async def delete_by_id(self, collection: str, normalized_id: str) -> None:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(MemoryRecordRow).where(
                            MemoryRecordRow.collection_id == collection,
                            MemoryRecordRow.id == normalized_id,
                        )
                    )
            logger.debug(f"Deleted {result.rowcount} row(s) for {collection}/{normalized_id}")
        except TRANSPORT_ERRORS as e:
            raise BackendUnavailable(f"Failed to delete {collection}/{normalized_id}: {e}") from e

    async def query_distinct(self, field_name: str) -> List[str]:
        column = _COLUMNS[check_field(field_name)]
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(column).distinct())
                return list(result.scalars().all())
        except TRANSPORT_ERRORS as e:
            raise BackendUnavailable(f"Failed to query distinct {field_name}: {e}") from e

    async def query_by_field(self, field_name: str, value: str) -> AsyncIterator[StoredRecord]:
        column = _COLUMNS[check_field(field_name)]
        try:
            async with self.session_factory() as session:
                result = await session.stream_scalars(
                    select(MemoryRecordRow).where(column == value)
                )
                try:
                    async for row in result:
                        yield _to_stored(row)
                finally:
                    await result.close()
        except TRANSPORT_ERRORS as e:
            raise BackendUnavailable(f"Failed to scan {field_name}={value}: {e}") from e
