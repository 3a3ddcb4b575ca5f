"""Pydantic schemas for the persisted record shape"""
import json
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import MalformedRecord
from .keys import normalize_key
from .records import Embedding, MemoryRecord, as_embedding


def serialize_embedding(embedding: Embedding) -> str:
    """Serialize an embedding as ``{"embedding": {"vector": [...]}}``"""
    vector = as_embedding(embedding).tolist()
    return json.dumps({"embedding": {"vector": vector}}, separators=(",", ":"))


def deserialize_embedding(payload: Optional[str]) -> Embedding:
    """
    Parse a serialized embedding payload

    Raises:
        MalformedRecord: If the payload is missing, not JSON, lacks the
            nested vector, or holds anything but finite numbers
    """
    if not payload:
        raise MalformedRecord("Embedding payload is empty")
    try:
        data = json.loads(payload)
    except ValueError as e:
        raise MalformedRecord(f"Embedding payload is not valid JSON: {e}") from e

    try:
        vector = data["embedding"]["vector"]
    except (KeyError, TypeError) as e:
        raise MalformedRecord("Embedding payload has no embedding.vector") from e

    if not isinstance(vector, list) or not all(
        isinstance(v, (int, float)) and not isinstance(v, bool) for v in vector
    ):
        raise MalformedRecord("Embedding vector must be a flat list of numbers")
    try:
        return as_embedding(vector)
    except ValueError as e:
        raise MalformedRecord(str(e)) from e


class StoredRecord(BaseModel):
    """Record as persisted by a backend"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    collection_id: str = Field(..., description="Collection (partition) identifier")
    id: str = Field(..., description="Normalized key")
    key: str = Field(..., description="Key as written by the caller")
    embedding: str = Field(..., description="Serialized embedding payload")
    metadata: str = Field("", description="Opaque metadata blob")
    timestamp: Optional[datetime] = None

    @classmethod
    def from_record(cls, collection: str, record: MemoryRecord) -> "StoredRecord":
        """Build the persisted shape of a record for the given collection"""
        if record.embedding is None:
            raise ValueError(f"Record {record.key!r} has no embedding")
        return cls(
            collection_id=collection,
            id=normalize_key(record.key),
            key=record.key,
            embedding=serialize_embedding(record.embedding),
            metadata=record.metadata,
            timestamp=record.timestamp,
        )

    def to_record(self, strict: bool = False) -> MemoryRecord:
        """
        Decode into a MemoryRecord

        Args:
            strict: Raise MalformedRecord on a corrupt embedding instead of
                returning the record with ``embedding=None``
        """
        try:
            embedding = deserialize_embedding(self.embedding)
        except MalformedRecord:
            if strict:
                raise
            embedding = None
        return MemoryRecord(
            key=self.key,
            collection=self.collection_id,
            embedding=embedding,
            metadata=self.metadata,
            timestamp=self.timestamp,
        )
