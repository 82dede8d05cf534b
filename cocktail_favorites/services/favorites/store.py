"""Storage primitives for favorite cocktail events.

The aggregators never talk to SQLAlchemy directly; they depend on
:class:`FavoriteStoreProtocol` so the test-suite can swap in an in-memory
implementation while production uses :class:`SQLAlchemyFavoriteStore`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Collection, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Protocol, runtime_checkable

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_favorites.db.models import (
    FavoriteCocktail as FavoriteCocktailModel,
    new_favorite_id,
    utcnow,
)
from cocktail_favorites.schemas.favorites import FavoriteCocktail
from cocktail_favorites.services.favorites.errors import (
    FavoriteAlreadyExistsError,
    FavoriteNotFoundError,
    FavoritesStoreUnavailableError,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class FavoriteStoreProtocol(Protocol):
    """Minimal storage surface required by the favorites aggregators."""

    async def add(self, user_id: str, cocktail_id: str) -> FavoriteCocktail:
        """Create a favorite event or raise :class:`FavoriteAlreadyExistsError`."""

    async def remove(self, user_id: str, cocktail_id: str) -> None:
        """Delete a favorite event or raise :class:`FavoriteNotFoundError`."""

    async def exists(self, user_id: str, cocktail_id: str) -> bool:
        """Return whether the user currently favorites the cocktail."""

    async def list_by_user(self, user_id: str) -> list[FavoriteCocktail]:
        """Return the user's favorites, newest first."""

    async def list_by_item_since(
        self, cocktail_id: str, since: datetime
    ) -> list[FavoriteCocktail]:
        """Return events for ``cocktail_id`` with ``favorited_at >= since``."""

    async def list_all(self) -> list[FavoriteCocktail]:
        """Return every active favorite event."""

    async def list_by_users(self, user_ids: Collection[str]) -> list[FavoriteCocktail]:
        """Return events owned by any of ``user_ids``."""

    async def list_by_items(
        self, cocktail_ids: Collection[str]
    ) -> list[FavoriteCocktail]:
        """Return events referencing any of ``cocktail_ids``."""


@asynccontextmanager
async def _translate_storage_errors(operation: str) -> AsyncIterator[None]:
    """Re-raise connectivity and timeout failures as a retryable domain error."""

    try:
        yield
    except (OperationalError, InterfaceError, SQLAlchemyTimeoutError) as exc:
        logger.error("Favorites store unavailable during %s: %s", operation, exc)
        raise FavoritesStoreUnavailableError(
            f"Favorites store unavailable during {operation}"
        ) from exc


def _to_schema(rows: Sequence[FavoriteCocktailModel]) -> list[FavoriteCocktail]:
    return [FavoriteCocktail.model_validate(row) for row in rows]


class SQLAlchemyFavoriteStore:
    """Favorites store backed by the ``favorite_cocktails`` table.

    The store only flushes; committing is left to whoever owns the session
    (the ``get_db`` dependency during requests, the caller in scripts).
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, user_id: str, cocktail_id: str) -> FavoriteCocktail:
        if await self.exists(user_id, cocktail_id):
            raise FavoriteAlreadyExistsError(user_id, cocktail_id)

        row = FavoriteCocktailModel(
            id=new_favorite_id(),
            user_id=user_id,
            cocktail_id=cocktail_id,
            favorited_at=utcnow(),
        )
        async with _translate_storage_errors("add"):
            try:
                # The SAVEPOINT confines a constraint failure to this insert;
                # work already flushed in the session survives it.
                async with self._session.begin_nested():
                    self._session.add(row)
                    await self._session.flush()
            except IntegrityError as exc:
                # A concurrent request inserted the same pair after our check.
                raise FavoriteAlreadyExistsError(user_id, cocktail_id) from exc
        return FavoriteCocktail.model_validate(row)

    async def remove(self, user_id: str, cocktail_id: str) -> None:
        statement = delete(FavoriteCocktailModel).where(
            FavoriteCocktailModel.user_id == user_id,
            FavoriteCocktailModel.cocktail_id == cocktail_id,
        )
        async with _translate_storage_errors("remove"):
            result = await self._session.execute(statement)
        if result.rowcount == 0:
            raise FavoriteNotFoundError(user_id, cocktail_id)

    async def exists(self, user_id: str, cocktail_id: str) -> bool:
        query = select(
            exists().where(
                FavoriteCocktailModel.user_id == user_id,
                FavoriteCocktailModel.cocktail_id == cocktail_id,
            )
        )
        async with _translate_storage_errors("exists"):
            result = await self._session.execute(query)
        return bool(result.scalar())

    async def list_by_user(self, user_id: str) -> list[FavoriteCocktail]:
        query = (
            select(FavoriteCocktailModel)
            .where(FavoriteCocktailModel.user_id == user_id)
            .order_by(FavoriteCocktailModel.favorited_at.desc())
        )
        return await self._fetch(query, "list_by_user")

    async def list_by_item_since(
        self, cocktail_id: str, since: datetime
    ) -> list[FavoriteCocktail]:
        query = select(FavoriteCocktailModel).where(
            FavoriteCocktailModel.cocktail_id == cocktail_id,
            FavoriteCocktailModel.favorited_at >= since,
        )
        return await self._fetch(query, "list_by_item_since")

    async def list_all(self) -> list[FavoriteCocktail]:
        return await self._fetch(select(FavoriteCocktailModel), "list_all")

    async def list_by_users(self, user_ids: Collection[str]) -> list[FavoriteCocktail]:
        if not user_ids:
            return []
        query = select(FavoriteCocktailModel).where(
            FavoriteCocktailModel.user_id.in_(list(user_ids))
        )
        return await self._fetch(query, "list_by_users")

    async def list_by_items(
        self, cocktail_ids: Collection[str]
    ) -> list[FavoriteCocktail]:
        if not cocktail_ids:
            return []
        query = select(FavoriteCocktailModel).where(
            FavoriteCocktailModel.cocktail_id.in_(list(cocktail_ids))
        )
        return await self._fetch(query, "list_by_items")

    async def _fetch(self, query, operation: str) -> list[FavoriteCocktail]:
        async with _translate_storage_errors(operation):
            result = await self._session.execute(query)
        return _to_schema(result.scalars().all())


__all__ = ["FavoriteStoreProtocol", "SQLAlchemyFavoriteStore"]
