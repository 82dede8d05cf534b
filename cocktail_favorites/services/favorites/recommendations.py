"""One-hop collaborative filtering over favorite cocktails."""

from __future__ import annotations

import logging

from cocktail_favorites.schemas.favorites import CocktailCount
from cocktail_favorites.services.favorites.popularity import rank_cocktails
from cocktail_favorites.services.favorites.store import FavoriteStoreProtocol

logger = logging.getLogger(__name__)

DEFAULT_RECOMMENDATION_LIMIT = 10


def resolve_limit(limit: int | None) -> int:
    """Return ``limit`` when positive, otherwise the default of 10."""

    if limit is None or limit <= 0:
        return DEFAULT_RECOMMENDATION_LIMIT
    return limit


class RecommendationEngine:
    """Suggests cocktails favorited by users who share a favorite with the caller.

    The algorithm:

    1. collect the caller's favorite cocktails; none means no basis (cold start);
    2. find every other user who favorited at least one of them;
    3. gather those users' favorites, dropping cocktails the caller already has;
    4. rank the remaining cocktails by how often they occur.

    There is no fallback for cold-start users and no weighting by recency.
    """

    def __init__(self, store: FavoriteStoreProtocol) -> None:
        self._store = store

    async def get_recommendations(
        self, user_id: str, limit: int | None = DEFAULT_RECOMMENDATION_LIMIT
    ) -> list[CocktailCount]:
        resolved_limit = resolve_limit(limit)

        my_cocktails = {
            favorite.cocktail_id for favorite in await self._store.list_by_user(user_id)
        }
        if not my_cocktails:
            return []

        similar_users = {
            favorite.user_id
            for favorite in await self._store.list_by_items(my_cocktails)
            if favorite.user_id != user_id
        }
        if not similar_users:
            return []

        candidates = [
            favorite
            for favorite in await self._store.list_by_users(similar_users)
            if favorite.cocktail_id not in my_cocktails
        ]
        logger.debug(
            "Recommendations for %s: %d similar users, %d candidate favorites",
            user_id,
            len(similar_users),
            len(candidates),
        )
        return rank_cocktails(candidates, limit=resolved_limit)


__all__ = [
    "DEFAULT_RECOMMENDATION_LIMIT",
    "RecommendationEngine",
    "resolve_limit",
]
