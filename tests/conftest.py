"""Shared fixtures for the favorite cocktails test-suite."""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tests import _ensure_repo_on_path

_ensure_repo_on_path()

from cocktail_favorites.db.connection import enable_sqlite_savepoints  # noqa: E402
from cocktail_favorites.db.models import Base  # noqa: E402
from tests.support.in_memory_store import InMemoryFavoriteStore  # noqa: E402

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def store() -> InMemoryFavoriteStore:
    return InMemoryFavoriteStore()


@pytest.fixture
def fixed_clock():
    """Clock pinned to 2024-06-15 12:00 UTC."""

    return lambda: FIXED_NOW


@pytest_asyncio.fixture
async def session() -> AsyncIterator[AsyncSession]:
    """Provide an in-memory SQLite session with the favorites schema created."""

    engine = enable_sqlite_savepoints(
        create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(engine, expire_on_commit=False)
    async with async_session() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()
    await engine.dispose()
