"""Pydantic schemas for API responses."""

from cocktail_favorites.schemas.error import (  # noqa: F401
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from cocktail_favorites.schemas.favorites import (  # noqa: F401
    CocktailCount,
    FavoriteCocktail,
    FavoriteCocktailCreate,
    FavoriteStatus,
    TrendPoint,
)
