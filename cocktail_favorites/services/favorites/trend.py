"""Per-cocktail favorite trends bucketed by day or month."""

from __future__ import annotations

import calendar
from collections import Counter
from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime, timedelta

from cocktail_favorites.schemas.favorites import (
    FavoriteCocktail,
    TrendInterval,
    TrendPoint,
)
from cocktail_favorites.services.favorites.store import FavoriteStoreProtocol

DAY_WINDOW = timedelta(days=30)
MONTH_WINDOW_MONTHS = 12


def utc_now() -> datetime:
    return datetime.now(UTC)


def normalize_interval(interval: str | None) -> TrendInterval:
    """Map any unknown interval onto ``"day"``; unknown values are not errors."""

    if interval == "month":
        return "month"
    return "day"


def subtract_months(moment: datetime, months: int) -> datetime:
    """Step ``months`` calendar months back, clamping the day to the month end."""

    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window_start(interval: TrendInterval, now: datetime) -> datetime:
    if interval == "month":
        return subtract_months(now, MONTH_WINDOW_MONTHS)
    return now - DAY_WINDOW


def bucket_key(interval: TrendInterval, moment: datetime) -> date:
    moment = moment.astimezone(UTC)
    if interval == "month":
        return date(moment.year, moment.month, 1)
    return moment.date()


def bucket_favorites(
    favorites: Iterable[FavoriteCocktail], interval: TrendInterval
) -> list[TrendPoint]:
    """Group favorites into calendar buckets sorted by period start."""

    counts = Counter(bucket_key(interval, favorite.favorited_at) for favorite in favorites)
    return [TrendPoint(period=period, count=counts[period]) for period in sorted(counts)]


class TrendAggregator:
    """Builds a cocktail's favorite trend over a recent window.

    ``"day"`` looks back 30 days, ``"month"`` looks back 12 calendar months.
    Points come back in ascending period order. Periods without favorites are
    omitted, so consumers must not assume a contiguous series.
    """

    def __init__(
        self,
        store: FavoriteStoreProtocol,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._clock = clock

    async def get_trend(
        self, cocktail_id: str, interval: str | None = "day"
    ) -> list[TrendPoint]:
        resolved = normalize_interval(interval)
        since = window_start(resolved, self._clock())

        # The store filters by cocktail and window so only relevant rows load.
        favorites = await self._store.list_by_item_since(cocktail_id, since)

        return bucket_favorites(favorites, resolved)


__all__ = [
    "DAY_WINDOW",
    "MONTH_WINDOW_MONTHS",
    "TrendAggregator",
    "bucket_favorites",
    "bucket_key",
    "normalize_interval",
    "subtract_months",
    "window_start",
]
