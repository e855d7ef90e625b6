"""Test configuration and fixtures for sieveql."""

import asyncio
import os
import sys
from typing import AsyncGenerator

import pytest
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tests.models import Base

# Try to load environment variables from .env file
load_dotenv()


@pytest.fixture(scope="session", autouse=True)
def event_loop_policy():
    """Set event loop policy for Windows compatibility."""
    if sys.platform.startswith("win"):
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    yield


@pytest.fixture(scope="function")
async def engine():
    """Create a test database engine for each test function.

    ``SIEVEQL_TEST_DATABASE_URL`` selects an external async database; by
    default an in-memory SQLite database is used.
    """
    test_db_url = os.getenv('SIEVEQL_TEST_DATABASE_URL')
    is_external_db = bool(test_db_url)
    engine = create_async_engine(test_db_url or "sqlite+aiosqlite:///:memory:", echo=False, future=True)
    async with engine.begin() as conn:
        if is_external_db:
            # Clean slate on shared databases
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    if is_external_db:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new database session for each test function."""
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


# Import fixtures from fixtures module
from tests.fixtures import populated_db, registry  # noqa: E402,F401
