"""FastAPI router exposing the caller's own favorites and recommendations."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from cocktail_favorites.api.identity import get_current_user_id
from cocktail_favorites.schemas.favorites import (
    CocktailCount,
    FavoriteCocktail,
    FavoriteCocktailCreate,
    FavoriteStatus,
)
from cocktail_favorites.services.favorites import (
    FavoriteAlreadyExistsError,
    FavoriteNotFoundError,
)
from cocktail_favorites.services.favorites.recommendations import (
    DEFAULT_RECOMMENDATION_LIMIT,
)
from cocktail_favorites.services.favorites_service import (
    FavoritesService,
    get_favorites_service,
)

router = APIRouter()


@router.post(
    "",
    response_model=FavoriteCocktail,
    status_code=status.HTTP_201_CREATED,
)
async def add_favorite(
    payload: FavoriteCocktailCreate,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteCocktail:
    """Mark a cocktail as one of the caller's favorites."""

    try:
        return await service.add_favorite(
            user_id=user_id, cocktail_id=payload.cocktail_id
        )
    except FavoriteAlreadyExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.get("/mine", response_model=list[FavoriteCocktail])
async def list_mine(
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> list[FavoriteCocktail]:
    """Return the caller's favorites, most recent first."""

    return await service.list_mine(user_id=user_id)


@router.get("/mine/{cocktail_id}", response_model=FavoriteStatus)
async def is_favorite(
    cocktail_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteStatus:
    return await service.is_favorite(user_id=user_id, cocktail_id=cocktail_id)


@router.get("/recommended", response_model=list[CocktailCount])
async def get_recommendations(
    limit: int | None = Query(
        DEFAULT_RECOMMENDATION_LIMIT,
        description="Maximum suggestions to return; non-positive values fall back to 10.",
    ),
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> list[CocktailCount]:
    """Suggest cocktails favorited by users who share a favorite with the caller."""

    return await service.get_recommendations(user_id=user_id, limit=limit)


@router.delete("/{cocktail_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(
    cocktail_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> Response:
    """Remove a cocktail from the caller's favorites."""

    try:
        await service.remove_favorite(user_id=user_id, cocktail_id=cocktail_id)
    except FavoriteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
