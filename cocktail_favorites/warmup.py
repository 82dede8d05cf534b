"""Startup readiness checks for the favorites database.

Containers for the API and the database usually start together, so the first
connection attempts can fail while PostgreSQL is still booting. The helpers
below retry a ``SELECT 1`` ping a bounded number of times with a fixed delay
before giving up.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine

from cocktail_favorites.db.connection import begin_engine_transaction
from cocktail_favorites.db.models import Base

logger = logging.getLogger(__name__)

_RETRYABLE_ERRORS = (OperationalError, DBAPIError, SQLAlchemyTimeoutError, OSError)


async def ping_database(engine: AsyncEngine) -> None:
    async with begin_engine_transaction(engine) as conn:
        await conn.execute(text("SELECT 1"))


async def wait_for_database(
    engine: AsyncEngine,
    *,
    max_attempts: int,
    delay_seconds: float,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Ping the database until it answers; return the attempt that succeeded.

    The last failure is re-raised once ``max_attempts`` is exhausted.
    """

    start = time.time()
    for attempt in range(1, max_attempts + 1):
        try:
            await ping_database(engine)
        except _RETRYABLE_ERRORS as exc:
            if attempt >= max_attempts:
                logger.error(
                    "Database still unavailable after %d attempts: %s",
                    max_attempts,
                    exc,
                )
                raise
            logger.warning(
                "Attempt %d/%d: database not ready, retrying in %.1fs (%s)",
                attempt,
                max_attempts,
                delay_seconds,
                exc,
            )
            await sleep(delay_seconds)
            continue

        elapsed = (time.time() - start) * 1000
        logger.info("✓ Database ready after %d attempt(s) (%.0fms)", attempt, elapsed)
        return attempt

    raise RuntimeError("max_attempts must be at least 1")


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing tables; used for the SQLite fallback and ``init_db``."""

    async with begin_engine_transaction(engine) as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✓ Favorites tables ensured")
