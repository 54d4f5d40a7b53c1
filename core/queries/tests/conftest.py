"""Pytest fixtures for core query tests."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from core.tables import metadata


@pytest_asyncio.fixture
async def db_conn():
    """
    Provide a connection to a fresh in-memory SQLite database.

    The schema is created per test and everything the test writes runs
    inside one transaction that is rolled back afterward.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    async with engine.connect() as conn:
        txn = await conn.begin()
        try:
            yield conn
        finally:
            await txn.rollback()

    await engine.dispose()
