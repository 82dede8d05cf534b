"""Tests for collaborative-filtering recommendations."""

from __future__ import annotations

import pytest

from cocktail_favorites.services.favorites import RecommendationEngine
from cocktail_favorites.services.favorites.recommendations import resolve_limit


@pytest.mark.asyncio
async def test_recommends_cocktails_of_users_sharing_a_favorite(store) -> None:
    await store.seed("u_A", "margarita")
    await store.seed("u_B", "margarita")
    await store.seed("u_B", "mojito")
    await store.seed("u_C", "mojito")

    result = await RecommendationEngine(store).get_recommendations("u_A", 10)

    assert [(row.cocktail_id, row.count) for row in result] == [("mojito", 1)]


@pytest.mark.asyncio
async def test_cold_start_user_gets_no_recommendations(store) -> None:
    await store.seed("u_B", "margarita")

    result = await RecommendationEngine(store).get_recommendations("u_D", 10)

    assert result == []
    assert store.calls == ["list_by_user"]


@pytest.mark.asyncio
async def test_no_similar_users_yields_empty_list(store) -> None:
    await store.seed("u_A", "margarita")
    await store.seed("u_B", "mojito")

    assert await RecommendationEngine(store).get_recommendations("u_A") == []


@pytest.mark.asyncio
async def test_never_recommends_cocktails_already_favorited(store) -> None:
    await store.seed("u_A", "margarita")
    await store.seed("u_A", "negroni")
    await store.seed("u_B", "margarita")
    await store.seed("u_B", "negroni")
    await store.seed("u_B", "spritz")
    await store.seed("u_C", "negroni")
    await store.seed("u_C", "spritz")
    await store.seed("u_C", "daiquiri")

    result = await RecommendationEngine(store).get_recommendations("u_A", 10)

    assert [(row.cocktail_id, row.count) for row in result] == [
        ("spritz", 2),
        ("daiquiri", 1),
    ]
    assert not {row.cocktail_id for row in result} & {"margarita", "negroni"}


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [None, 0, -3])
async def test_non_positive_limit_defaults_to_ten(store, limit) -> None:
    await store.seed("u_A", "base")
    await store.seed("u_B", "base")
    for index in range(12):
        await store.seed("u_B", f"cocktail-{index:02d}")

    result = await RecommendationEngine(store).get_recommendations("u_A", limit)

    assert len(result) == 10


@pytest.mark.asyncio
async def test_limit_truncates_ranking(store) -> None:
    await store.seed("u_A", "base")
    await store.seed("u_B", "base")
    await store.seed("u_B", "alpha")
    await store.seed("u_B", "beta")

    result = await RecommendationEngine(store).get_recommendations("u_A", 1)

    assert [row.cocktail_id for row in result] == ["alpha"]


def test_resolve_limit() -> None:
    assert resolve_limit(None) == 10
    assert resolve_limit(0) == 10
    assert resolve_limit(3) == 3
