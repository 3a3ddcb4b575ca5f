"""Database configuration and connection"""
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from .config import MemoryStoreSettings
from .models import Base

logger = logging.getLogger(__name__)


def to_async_url(url: str) -> str:
    """Convert a plain PostgreSQL URL to the asyncpg dialect"""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def create_engine(settings: MemoryStoreSettings) -> AsyncEngine:
    """Create the async engine described by settings"""
    url = to_async_url(settings.database_url)
    options = {
        "echo": settings.echo_sql,
        "pool_pre_ping": True,  # Verify connections before using
    }
    if url.startswith("postgresql"):
        options.update(
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_recycle=settings.pool_recycle,
        )
    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    """Async session factory bound to engine"""
    return sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine):
    """Initialize database (create tables)"""
    logger.info("Initializing database...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized successfully")


async def drop_db(engine: AsyncEngine):
    """Drop all memory store tables"""
    logger.info("Dropping memory store tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
