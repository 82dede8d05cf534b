#!/usr/bin/env python
"""Create the favorites tables once the database accepts connections."""
import asyncio
import logging

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from cocktail_favorites.db.connection import create_engine
from cocktail_favorites.main import validate_environment
from cocktail_favorites.settings import get_settings
from cocktail_favorites.warmup import create_tables, wait_for_database


async def init_db() -> None:
    settings = get_settings()
    engine = create_engine(settings)
    try:
        await wait_for_database(
            engine,
            max_attempts=settings.db_startup_max_attempts,
            delay_seconds=settings.db_startup_retry_delay_seconds,
        )
        await create_tables(engine)
    finally:
        await engine.dispose()
    print("✓ Database tables created successfully")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    validate_environment()
    asyncio.run(init_db())
