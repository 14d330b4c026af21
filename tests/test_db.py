"""Tests for the document store connection lifecycle."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

from catalog_sync import db


def make_client(ping_error=None):
    client = MagicMock()
    client.admin.command = AsyncMock(side_effect=ping_error)
    client.close = AsyncMock()
    client.__getitem__.return_value = MagicMock(name="database")
    return client


@pytest_asyncio.fixture(autouse=True)
async def reset_store():
    yield
    await db.close_document_store()


@pytest.mark.asyncio
async def test_init_pings_and_exposes_database():
    client = make_client()
    with patch("catalog_sync.db.AsyncMongoClient", return_value=client) as mock_cls:
        database = await db.init_document_store("mongodb://localhost:27017", "fpl-data")
        again = await db.init_document_store("mongodb://localhost:27017", "fpl-data")

    mock_cls.assert_called_once()
    client.admin.command.assert_awaited_once_with("ping")
    client.__getitem__.assert_called_once_with("fpl-data")
    assert database is again
    assert db.get_document_store() is database


@pytest.mark.asyncio
async def test_failed_ping_closes_client_and_raises():
    client = make_client(ping_error=RuntimeError("server selection timeout"))
    with patch("catalog_sync.db.AsyncMongoClient", return_value=client):
        with pytest.raises(RuntimeError):
            await db.init_document_store("mongodb://nowhere:27017", "fpl-data")

    client.close.assert_awaited_once()
    assert db.get_document_store() is None


@pytest.mark.asyncio
async def test_context_manager_closes():
    client = make_client()
    with patch("catalog_sync.db.AsyncMongoClient", return_value=client):
        async with db.document_store("mongodb://localhost:27017", "fpl-data") as database:
            assert database is not None

    client.close.assert_awaited_once()
    assert db.get_document_store() is None
