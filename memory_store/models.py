"""Database models"""
from sqlalchemy import Column, DateTime, Index, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class MemoryRecordRow(Base):
    """One memory record; collection_id is the partition column"""
    __tablename__ = "memory_records"

    collection_id = Column(String(255), primary_key=True)
    id = Column(String(512), primary_key=True)  # normalized key
    key = Column(String(512), nullable=False)  # key as written by the caller
    embedding = Column(Text, nullable=False)
    metadata_ = Column('metadata', Text, nullable=False, default="")  # Use metadata_ to avoid conflict with Base.metadata
    timestamp = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('idx_memory_records_collection', 'collection_id'),
    )
