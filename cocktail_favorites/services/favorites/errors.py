"""Exceptions raised by the favorites store and aggregators.

Each class also derives from the built-in exception the API layer already
translates (``ValueError`` → 4xx, ``LookupError`` → 404, ``RuntimeError`` →
5xx), so callers that only know the built-ins keep working.
"""

from __future__ import annotations

from collections.abc import Iterable


class FavoritesError(Exception):
    """Base class for every failure raised by the favorites domain."""


class InvalidTopValueError(FavoritesError, ValueError):
    """Raised when a popularity ranking is requested with a disallowed size."""

    def __init__(self, top: int | str, allowed: Iterable[int]) -> None:
        self.top = top
        self.allowed = tuple(allowed)
        super().__init__(
            f"Invalid 'top' value {top}. Allowed values: "
            f"{', '.join(str(value) for value in self.allowed)}"
        )


class FavoriteAlreadyExistsError(FavoritesError, ValueError):
    """Raised when the user already has an active favorite for the cocktail."""

    def __init__(self, user_id: str, cocktail_id: str) -> None:
        self.user_id = user_id
        self.cocktail_id = cocktail_id
        super().__init__(f"Cocktail '{cocktail_id}' is already in favorites")


class FavoriteNotFoundError(FavoritesError, LookupError):
    """Raised when removing a favorite the user does not have."""

    def __init__(self, user_id: str, cocktail_id: str) -> None:
        self.user_id = user_id
        self.cocktail_id = cocktail_id
        super().__init__(f"Cocktail '{cocktail_id}' is not in favorites")


class FavoritesStoreUnavailableError(FavoritesError, RuntimeError):
    """Raised when the backing store cannot be reached; callers may retry."""


__all__ = [
    "FavoriteAlreadyExistsError",
    "FavoriteNotFoundError",
    "FavoritesError",
    "FavoritesStoreUnavailableError",
    "InvalidTopValueError",
]
