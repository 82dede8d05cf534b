"""Favorites domain components split by responsibility.

The store isolates persistence; the aggregators are read-only views computed
from whatever store they are handed.
"""

from .errors import (
    FavoriteAlreadyExistsError,
    FavoriteNotFoundError,
    FavoritesError,
    FavoritesStoreUnavailableError,
    InvalidTopValueError,
)
from .popularity import ALLOWED_TOP_VALUES, PopularityAggregator
from .recommendations import RecommendationEngine
from .store import FavoriteStoreProtocol, SQLAlchemyFavoriteStore
from .trend import TrendAggregator

__all__ = [
    "ALLOWED_TOP_VALUES",
    "FavoriteAlreadyExistsError",
    "FavoriteNotFoundError",
    "FavoriteStoreProtocol",
    "FavoritesError",
    "FavoritesStoreUnavailableError",
    "InvalidTopValueError",
    "PopularityAggregator",
    "RecommendationEngine",
    "SQLAlchemyFavoriteStore",
    "TrendAggregator",
]
