from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

_client: Optional[AsyncMongoClient] = None
_database: Optional[AsyncDatabase] = None


async def init_document_store(uri: str, db_name: str, timeout_ms: int = 10000) -> AsyncDatabase:
    """Open the global document-store client if it is not open yet.

    Pings the server so a bad URI or unreachable host fails here, before any
    rows are processed.
    """
    global _client, _database
    if _client is None:
        client = AsyncMongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        try:
            await client.admin.command("ping")
        except Exception:
            await client.close()
            raise
        _client = client
        _database = client[db_name]
    return _database


async def close_document_store() -> None:
    global _client, _database
    if _client is not None:
        await _client.close()
        _client = None
        _database = None


def get_document_store() -> Optional[AsyncDatabase]:
    """Return the open database handle (None until init_document_store ran)."""
    return _database


@asynccontextmanager
async def document_store(uri: str, db_name: str) -> AsyncIterator[AsyncDatabase]:
    database = await init_document_store(uri, db_name)
    try:
        yield database
    finally:
        await close_document_store()
