"""Database models and engine helpers for the favorite cocktails service."""

from .models import Base, FavoriteCocktail

__all__ = ["Base", "FavoriteCocktail"]
