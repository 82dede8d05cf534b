"""FastAPI router exposing favorites analytics across all users."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from cocktail_favorites.api.identity import get_current_user_id, require_trend_access
from cocktail_favorites.schemas.favorites import CocktailCount, TrendPoint
from cocktail_favorites.services.favorites import InvalidTopValueError
from cocktail_favorites.services.favorites.popularity import (
    ALLOWED_TOP_VALUES,
    DEFAULT_TOP,
    parse_top,
)
from cocktail_favorites.services.favorites_service import (
    FavoritesService,
    get_favorites_service,
)

router = APIRouter()


@router.get(
    "/popular",
    response_model=list[CocktailCount],
    summary="Rank cocktails by number of favorites",
)
async def get_popular(
    # Taken as a string so "?top=ten" is a 400 like "?top=7", not a 422.
    top: str = Query(
        str(DEFAULT_TOP),
        description=f"Ranking size; one of {', '.join(map(str, ALLOWED_TOP_VALUES))}.",
    ),
    _user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> list[CocktailCount]:
    try:
        return await service.get_popular(top=parse_top(top))
    except InvalidTopValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get(
    "/trend/{cocktail_id}",
    response_model=list[TrendPoint],
    summary="Favorites received by a cocktail per day or month",
)
async def get_trend(
    cocktail_id: str,
    interval: str = Query(
        "day",
        description=(
            "Bucket size: 'day' (last 30 days) or 'month' (last 12 months)."
            " Unrecognised values fall back to 'day'."
        ),
    ),
    _user_id: str = Depends(require_trend_access),
    service: FavoritesService = Depends(get_favorites_service),
) -> list[TrendPoint]:
    """Return ``(period, count)`` buckets in ascending period order."""

    return await service.get_trend(cocktail_id=cocktail_id, interval=interval)
