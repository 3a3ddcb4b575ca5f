"""CLI for the memory store"""
import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import click

from . import __version__
from .backends.sql import SqlAlchemyBackend
from .config import MemoryStoreSettings
from .database import create_engine, create_session_factory, init_db
from .records import MemoryRecord, as_embedding
from .store import MemoryStore


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


def parse_vector(value: str):
    """Parse a JSON list of numbers given on the command line"""
    try:
        vector = json.loads(value)
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON: {e}")
    if not isinstance(vector, list) or not vector:
        raise click.BadParameter("expected a non-empty JSON list of numbers")
    try:
        return as_embedding(vector)
    except (TypeError, ValueError) as e:
        raise click.BadParameter(str(e))


@asynccontextmanager
async def open_store(settings: MemoryStoreSettings):
    """Memory store over the configured database; disposes the engine on exit"""
    engine = create_engine(settings)
    try:
        yield MemoryStore(SqlAlchemyBackend(create_session_factory(engine)), settings)
    finally:
        await engine.dispose()


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx):
    """Memory Store CLI - store and search embeddings"""
    settings = MemoryStoreSettings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    ctx.obj = settings


@cli.command('init-db')
@click.pass_obj
def init_db_command(settings: MemoryStoreSettings):
    """Create the memory_records table"""
    async def _run():
        engine = create_engine(settings)
        try:
            await init_db(engine)
        finally:
            await engine.dispose()

    click.echo("Initializing database...")
    try:
        run_async(_run())
        click.echo("✓ Database initialized successfully")
    except Exception as e:
        click.echo(f"✗ Error initializing database: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('collection')
@click.argument('key')
@click.option('--vector', required=True, help='Embedding as a JSON list')
@click.option('--metadata', default='', help='Metadata blob stored verbatim')
@click.pass_obj
def put(settings: MemoryStoreSettings, collection: str, key: str, vector: str, metadata: str):
    """Insert or replace a record"""
    record = MemoryRecord(
        key=key,
        collection=collection,
        embedding=parse_vector(vector),
        metadata=metadata,
        timestamp=datetime.now(timezone.utc),
    )

    async def _run():
        async with open_store(settings) as store:
            return await store.put(collection, record)

    try:
        run_async(_run())
        click.echo(f"✓ Stored {key} in {collection}")
    except Exception as e:
        click.echo(f"✗ Error storing record: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('collection')
@click.argument('key')
@click.pass_obj
def get(settings: MemoryStoreSettings, collection: str, key: str):
    """Print a record as JSON"""
    async def _run():
        async with open_store(settings) as store:
            return await store.get(collection, key)

    try:
        record = run_async(_run())
    except Exception as e:
        click.echo(f"✗ Error reading record: {e}", err=True)
        sys.exit(1)

    if record is None:
        click.echo("not found", err=True)
        sys.exit(1)

    click.echo(json.dumps({
        "key": record.key,
        "collection": record.collection,
        "embedding": None if record.embedding is None else record.embedding.tolist(),
        "metadata": record.metadata,
        "timestamp": record.timestamp.isoformat() if record.timestamp else None,
    }, indent=2))


@cli.command()
@click.argument('collection')
@click.argument('key')
@click.pass_obj
def delete(settings: MemoryStoreSettings, collection: str, key: str):
    """Delete a record"""
    async def _run():
        async with open_store(settings) as store:
            await store.delete(collection, key)

    try:
        run_async(_run())
        click.echo(f"✓ Deleted {key} from {collection}")
    except Exception as e:
        click.echo(f"✗ Error deleting record: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_obj
def collections(settings: MemoryStoreSettings):
    """List collections"""
    async def _run():
        async with open_store(settings) as store:
            return [name async for name in store.list_collections()]

    try:
        names = run_async(_run())
    except Exception as e:
        click.echo(f"✗ Error listing collections: {e}", err=True)
        sys.exit(1)

    for name in names:
        click.echo(name)


@cli.command()
@click.argument('collection')
@click.option('--vector', required=True, help='Query embedding as a JSON list')
@click.option('-k', '--limit', 'k', default=5, show_default=True, help='Number of matches')
@click.option('--min-score', default=0.0, show_default=True, help='Minimum cosine similarity')
@click.pass_obj
def search(settings: MemoryStoreSettings, collection: str, vector: str, k: int, min_score: float):
    """Print the closest records as score<TAB>key lines"""
    query = parse_vector(vector)

    async def _run():
        async with open_store(settings) as store:
            return await store.search(collection, query, k=k, min_score=min_score)

    try:
        matches = run_async(_run())
    except Exception as e:
        click.echo(f"✗ Error searching: {e}", err=True)
        sys.exit(1)

    for match in matches:
        click.echo(f"{match.score:.6f}\t{match.key}")


if __name__ == '__main__':
    cli()
