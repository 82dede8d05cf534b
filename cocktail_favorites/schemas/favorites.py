"""Pydantic schemas that power the favorites API surface."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

TrendInterval = Literal["day", "month"]


class FavoriteCocktailCreate(BaseModel):
    """Payload for marking a cocktail as favorite."""

    cocktail_id: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Identifier of the cocktail in the catalogue service.",
    )

    @field_validator("cocktail_id")
    @classmethod
    def _strip_cocktail_id(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("cocktail_id must not be blank")
        return cleaned


class FavoriteCocktail(BaseModel):
    """Read model for a single favorite event."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Immutable identifier of the favorite event")
    user_id: str = Field(..., description="Opaque identifier of the owning user")
    cocktail_id: str
    favorited_at: datetime = Field(
        ..., description="UTC instant at which the cocktail was marked favorite."
    )

    @field_validator("favorited_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        """SQLite hands back naive datetimes; treat them as UTC."""

        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class FavoriteStatus(BaseModel):
    """Answer to "has the caller favorited this cocktail?"."""

    cocktail_id: str
    is_favorite: bool


class CocktailCount(BaseModel):
    """A cocktail paired with the number of favorites backing it.

    Used both for the global popularity ranking and for recommendations, where
    ``count`` is the number of similar users that favorited the cocktail.
    """

    cocktail_id: str
    count: int = Field(..., ge=1)


class TrendPoint(BaseModel):
    """Number of favorites a cocktail received within one calendar period."""

    period: date = Field(
        ...,
        description="First day of the bucket (the day itself or the month start).",
    )
    count: int = Field(..., ge=1)


__all__ = [
    "CocktailCount",
    "FavoriteCocktail",
    "FavoriteCocktailCreate",
    "FavoriteStatus",
    "TrendInterval",
    "TrendPoint",
]
