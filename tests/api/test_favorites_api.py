"""HTTP-level tests for the favorites routers with an in-memory store."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
import pytest
from fastapi.testclient import TestClient

from cocktail_favorites.api.identity import NAME_IDENTIFIER_CLAIM, ROLE_CLAIM
from cocktail_favorites.main import app
from cocktail_favorites.services.favorites import FavoritesStoreUnavailableError
from cocktail_favorites.services.favorites_service import (
    FavoritesService,
    get_favorites_service,
)
from cocktail_favorites.settings import AppSettings, get_settings
from tests.conftest import FIXED_NOW
from tests.support.in_memory_store import InMemoryFavoriteStore

JWT_KEY = "test-signing-key-that-is-long-enough-for-hs256"
JWT_ISSUER = "https://bar.example"
JWT_AUDIENCE = "cocktail-favorites"


def _settings(**overrides: Any) -> AppSettings:
    values: dict[str, Any] = {
        "jwt_key": JWT_KEY,
        "jwt_issuer": JWT_ISSUER,
        "jwt_audience": JWT_AUDIENCE,
    }
    values.update(overrides)
    return AppSettings(**values)


def _token(
    subject: str | None,
    *,
    roles: list[str] | None = None,
    key: str = JWT_KEY,
    audience: str = JWT_AUDIENCE,
    expires_in: timedelta = timedelta(minutes=15),
    **claims: Any,
) -> str:
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "iss": JWT_ISSUER,
        "aud": audience,
        "iat": now,
        "exp": now + expires_in,
        **claims,
    }
    if subject is not None:
        payload["sub"] = subject
    if roles is not None:
        payload["role"] = roles
    return jwt.encode(payload, key, algorithm="HS256")


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


ALICE = _bearer(_token("alice"))
ADMIN = _bearer(_token("root", roles=["viewer", "Admin"]))


def _seed(store: InMemoryFavoriteStore, user_id: str, cocktail_id: str) -> None:
    asyncio.run(store.seed(user_id, cocktail_id))


@pytest.fixture
def client(store: InMemoryFavoriteStore, fixed_clock) -> Iterator[TestClient]:
    app.dependency_overrides[get_favorites_service] = lambda: FavoritesService(
        store, clock=fixed_clock
    )
    app.dependency_overrides[get_settings] = lambda: _settings()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_add_list_and_remove_favorite(client: TestClient) -> None:
    created = client.post(
        "/api/favorites", json={"cocktail_id": " margarita "}, headers=ALICE
    )

    assert created.status_code == 201
    body = created.json()
    assert body["cocktail_id"] == "margarita"
    assert body["user_id"] == "alice"
    assert "X-Request-ID" in created.headers

    mine = client.get("/api/favorites/mine", headers=ALICE)
    assert [row["cocktail_id"] for row in mine.json()] == ["margarita"]

    status = client.get("/api/favorites/mine/margarita", headers=ALICE)
    assert status.json() == {"cocktail_id": "margarita", "is_favorite": True}

    removed = client.delete("/api/favorites/margarita", headers=ALICE)
    assert removed.status_code == 204
    assert removed.content == b""

    status = client.get("/api/favorites/mine/margarita", headers=ALICE)
    assert status.json()["is_favorite"] is False


def test_duplicate_favorite_returns_conflict(client: TestClient) -> None:
    client.post("/api/favorites", json={"cocktail_id": "margarita"}, headers=ALICE)

    response = client.post(
        "/api/favorites", json={"cocktail_id": "margarita"}, headers=ALICE
    )

    assert response.status_code == 409
    body = response.json()
    assert body["error_type"] == "conflict"
    assert body["detail"] == "Cocktail 'margarita' is already in favorites"
    assert body["request_id"] == response.headers["X-Request-ID"]


def test_removing_unknown_favorite_returns_not_found(client: TestClient) -> None:
    response = client.delete("/api/favorites/margarita", headers=ALICE)

    assert response.status_code == 404
    assert response.json()["error_type"] == "not_found"


def test_blank_cocktail_id_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/api/favorites", json={"cocktail_id": "   "}, headers=ALICE
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "validation_error"


def test_popular_ranking(client: TestClient, store: InMemoryFavoriteStore) -> None:
    _seed(store, "u1", "margarita")
    _seed(store, "u2", "margarita")
    _seed(store, "u3", "mojito")

    response = client.get(
        "/api/favorites/global/popular", params={"top": 1}, headers=ALICE
    )

    assert response.status_code == 200
    assert response.json() == [{"cocktail_id": "margarita", "count": 2}]


def test_popular_rejects_disallowed_top(client: TestClient, store) -> None:
    response = client.get(
        "/api/favorites/global/popular", params={"top": 7}, headers=ALICE
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error_type"] == "invalid_argument"
    assert "1, 3, 5, 10, 20, 50" in body["detail"]
    assert store.calls == []



def test_popular_rejects_non_numeric_top(client: TestClient, store) -> None:
    response = client.get(
        "/api/favorites/global/popular", params={"top": "ten"}, headers=ALICE
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error_type"] == "invalid_argument"
    assert "Invalid 'top' value ten" in body["detail"]
    assert store.calls == []

def test_recommendations_for_caller(client: TestClient, store) -> None:
    _seed(store, "alice", "margarita")
    _seed(store, "bob", "margarita")
    _seed(store, "bob", "mojito")

    response = client.get(
        "/api/favorites/recommended", params={"limit": 0}, headers=ALICE
    )

    assert response.status_code == 200
    assert response.json() == [{"cocktail_id": "mojito", "count": 1}]


def test_trend_requires_role(client: TestClient, store) -> None:
    asyncio.run(store.seed("u1", "mojito", FIXED_NOW - timedelta(days=5)))

    forbidden = client.get("/api/favorites/global/trend/mojito", headers=ALICE)
    allowed = client.get(
        "/api/favorites/global/trend/mojito",
        params={"interval": "fortnight"},
        headers=ADMIN,
    )

    assert forbidden.status_code == 403
    assert forbidden.json()["error_type"] == "authorization_error"
    assert store.calls == ["list_by_item_since"]
    assert allowed.status_code == 200
    assert allowed.json() == [{"period": "2024-06-10", "count": 1}]


def test_trend_role_is_configurable(client: TestClient) -> None:
    app.dependency_overrides[get_settings] = lambda: _settings(
        trend_required_role="Bartender"
    )

    admin = client.get("/api/favorites/global/trend/mojito", headers=ADMIN)
    bartender = client.get(
        "/api/favorites/global/trend/mojito",
        headers=_bearer(_token("barkeep", roles=["bartender"])),
    )

    assert admin.status_code == 403
    assert bartender.status_code == 200


def test_aspnet_style_claims_are_understood(client: TestClient, store) -> None:
    token = _token(
        None,
        **{NAME_IDENTIFIER_CLAIM: "carol", ROLE_CLAIM: "Admin"},
    )

    mine = client.post(
        "/api/favorites", json={"cocktail_id": "negroni"}, headers=_bearer(token)
    )
    trend = client.get("/api/favorites/global/trend/negroni", headers=_bearer(token))

    assert mine.status_code == 201
    assert mine.json()["user_id"] == "carol"
    assert trend.status_code == 200


@pytest.mark.parametrize(
    "headers",
    [
        pytest.param({}, id="missing"),
        pytest.param({"Authorization": "Basic YWxpY2U6c2VjcmV0"}, id="not-bearer"),
        pytest.param(_bearer("not-a-jwt"), id="malformed"),
        pytest.param(
            _bearer(_token("alice", expires_in=timedelta(minutes=-5))), id="expired"
        ),
        pytest.param(
            _bearer(_token("alice", key="another-signing-key-of-sufficient-size")),
            id="bad-signature",
        ),
        pytest.param(
            _bearer(_token("alice", audience="someone-else")), id="wrong-audience"
        ),
        pytest.param(_bearer(_token(None)), id="no-subject"),
    ],
)
def test_rejected_tokens_return_unauthorized(
    client: TestClient, store, headers: dict[str, str]
) -> None:
    response = client.get("/api/favorites/mine", headers=headers)

    assert response.status_code == 401
    assert response.json()["error_type"] == "authentication_error"
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert store.calls == []


def test_wrong_issuer_is_rejected(client: TestClient) -> None:
    token = _token("alice", iss="https://elsewhere.example")

    response = client.get("/api/favorites/mine", headers=_bearer(token))

    assert response.status_code == 401


def test_unconfigured_validation_rejects_every_token(client: TestClient) -> None:
    app.dependency_overrides[get_settings] = lambda: _settings(jwt_key=None)

    response = client.get("/api/favorites/mine", headers=ALICE)

    assert response.status_code == 401
    assert response.json()["error_type"] == "authentication_error"


def test_store_outage_maps_to_service_unavailable(client: TestClient) -> None:
    class _BrokenService:
        async def list_mine(self, *, user_id: str):
            raise FavoritesStoreUnavailableError(
                "Favorites store unavailable during list_by_user"
            )

    app.dependency_overrides[get_favorites_service] = lambda: _BrokenService()

    response = client.get("/api/favorites/mine", headers=ALICE)

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "5"
    assert response.json()["error_type"] == "service_unavailable"


def test_healthcheck(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}
