"""Business logic powering the favorites API endpoints.

Storage primitives are delegated to a :class:`FavoriteStoreProtocol`
implementation:

* ``add``/``remove``/``exists`` for the caller's own favorites.
* ``list_by_user`` for the "mine" listing.
* the bulk listings consumed by the aggregators.

Read-only analytics live in dedicated collaborators:

* :class:`PopularityAggregator` for the global ranking.
* :class:`TrendAggregator` for per-cocktail day/month buckets.
* :class:`RecommendationEngine` for one-hop collaborative filtering.

The service itself holds no state besides these collaborators, so FastAPI
builds a fresh instance per request.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_favorites.db.connection import get_db
from cocktail_favorites.schemas.favorites import (
    CocktailCount,
    FavoriteCocktail,
    FavoriteStatus,
    TrendPoint,
)
from cocktail_favorites.services.favorites import (
    FavoriteStoreProtocol,
    PopularityAggregator,
    RecommendationEngine,
    SQLAlchemyFavoriteStore,
    TrendAggregator,
)
from cocktail_favorites.services.favorites.popularity import DEFAULT_TOP
from cocktail_favorites.services.favorites.recommendations import (
    DEFAULT_RECOMMENDATION_LIMIT,
)
from cocktail_favorites.services.favorites.trend import utc_now

logger = logging.getLogger(__name__)


class FavoritesService:
    """Orchestrates the favorites store and the analytics aggregators."""

    def __init__(
        self,
        store: FavoriteStoreProtocol,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._popularity = PopularityAggregator(store)
        self._trend = TrendAggregator(store, clock=clock)
        self._recommendations = RecommendationEngine(store)

    async def add_favorite(self, *, user_id: str, cocktail_id: str) -> FavoriteCocktail:
        favorite = await self._store.add(user_id, cocktail_id)
        logger.info("User %s favorited cocktail %s", user_id, cocktail_id)
        return favorite

    async def remove_favorite(self, *, user_id: str, cocktail_id: str) -> None:
        await self._store.remove(user_id, cocktail_id)
        logger.info("User %s removed cocktail %s from favorites", user_id, cocktail_id)

    async def is_favorite(self, *, user_id: str, cocktail_id: str) -> FavoriteStatus:
        exists = await self._store.exists(user_id, cocktail_id)
        return FavoriteStatus(cocktail_id=cocktail_id, is_favorite=exists)

    async def list_mine(self, *, user_id: str) -> list[FavoriteCocktail]:
        return await self._store.list_by_user(user_id)

    async def get_popular(self, *, top: int = DEFAULT_TOP) -> list[CocktailCount]:
        return await self._popularity.get_top(top)

    async def get_trend(
        self, *, cocktail_id: str, interval: str | None = "day"
    ) -> list[TrendPoint]:
        return await self._trend.get_trend(cocktail_id, interval)

    async def get_recommendations(
        self, *, user_id: str, limit: int | None = DEFAULT_RECOMMENDATION_LIMIT
    ) -> list[CocktailCount]:
        return await self._recommendations.get_recommendations(user_id, limit)


async def get_favorites_service(
    session: AsyncSession = Depends(get_db),
) -> FavoritesService:
    """FastAPI dependency that wires the orchestrator to the request session."""

    return FavoritesService(SQLAlchemyFavoriteStore(session))


__all__ = ["FavoritesService", "get_favorites_service"]
