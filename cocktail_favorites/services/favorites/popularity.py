"""Global popularity ranking of favorited cocktails."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from cocktail_favorites.schemas.favorites import CocktailCount, FavoriteCocktail
from cocktail_favorites.services.favorites.errors import InvalidTopValueError
from cocktail_favorites.services.favorites.store import FavoriteStoreProtocol

ALLOWED_TOP_VALUES: tuple[int, ...] = (1, 3, 5, 10, 20, 50)
DEFAULT_TOP = 10


def rank_cocktails(
    favorites: Iterable[FavoriteCocktail], *, limit: int
) -> list[CocktailCount]:
    """Count favorites per cocktail and keep the ``limit`` most frequent.

    Equal counts are ordered by ascending cocktail id so the ranking is stable
    across calls and storage backends.
    """

    counts = Counter(favorite.cocktail_id for favorite in favorites)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [
        CocktailCount(cocktail_id=cocktail_id, count=count)
        for cocktail_id, count in ranked[:limit]
    ]


def parse_top(raw: int | str) -> int:
    """Turn a query-string ranking size into an int.

    Non-numeric input is an invalid ranking size like any other disallowed
    value, not a malformed request.
    """

    if isinstance(raw, int):
        return raw
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise InvalidTopValueError(raw, ALLOWED_TOP_VALUES) from exc


class PopularityAggregator:
    """Ranks cocktails by how many users currently favorite them."""

    def __init__(self, store: FavoriteStoreProtocol) -> None:
        self._store = store

    async def get_top(self, top: int = DEFAULT_TOP) -> list[CocktailCount]:
        if isinstance(top, bool) or top not in ALLOWED_TOP_VALUES:
            raise InvalidTopValueError(top, ALLOWED_TOP_VALUES)

        favorites = await self._store.list_all()
        return rank_cocktails(favorites, limit=top)


__all__ = [
    "ALLOWED_TOP_VALUES",
    "DEFAULT_TOP",
    "PopularityAggregator",
    "parse_top",
    "rank_cocktails",
]
