"""Tests covering the structured error envelope and the handlers using it."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest
from fastapi import Request, status
from sqlalchemy.exc import DBAPIError
from starlette.datastructures import Headers

import cocktail_favorites.main as favorites_main
from cocktail_favorites.schemas.error import ErrorType, ValidationErrorDetail
from cocktail_favorites.services.favorites import FavoritesStoreUnavailableError
from cocktail_favorites.utils import error_responses
from cocktail_favorites.utils.error_responses import (
    build_error_response,
    build_validation_error_response,
    error_json_response,
)
from cocktail_favorites.utils.request_context import clear_request_id, set_request_id


def _freeze_timestamp(monkeypatch: pytest.MonkeyPatch, fixed: datetime) -> None:
    monkeypatch.setattr(error_responses, "_current_timestamp", lambda: fixed)


def _build_request(path: str = "/api/favorites") -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": Headers().raw,
    }
    return Request(scope)


def test_build_validation_error_response_includes_context_metadata(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The helper should embed the request ID and a timezone-aware timestamp."""

    fixed_timestamp = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)
    _freeze_timestamp(monkeypatch, fixed_timestamp)

    token = set_request_id("req-123")
    try:
        response = build_validation_error_response(
            message="Request validation failed",
            detail="1 validation error(s)",
            status_code=422,
            path="/api/favorites",
            errors=[
                ValidationErrorDetail(
                    field="body.cocktail_id", message="Field required", value=None
                )
            ],
        )
    finally:
        clear_request_id(token)

    assert response.request_id == "req-123"
    assert response.timestamp == fixed_timestamp
    assert response.error_type is ErrorType.VALIDATION_ERROR
    assert response.errors[0].field == "body.cocktail_id"


def test_explicit_request_id_wins_over_context() -> None:
    token = set_request_id("req-context")
    try:
        response = build_error_response(
            error_type=ErrorType.CONFLICT,
            message="Conflict",
            detail="Cocktail 'margarita' is already in favorites",
            status_code=409,
            path="/api/favorites",
            request_id="req-explicit",
        )
    finally:
        clear_request_id(token)

    assert response.request_id == "req-explicit"
    assert response.retry_after is None


def test_error_json_response_sets_retry_after_header() -> None:
    payload = build_error_response(
        error_type=ErrorType.SERVICE_UNAVAILABLE,
        message="Favorites store unavailable",
        detail="down",
        status_code=503,
        path="/api/favorites/mine",
        retry_after=5,
    )

    response = error_json_response(payload)

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "5"
    assert json.loads(response.body.decode())["retry_after"] == 5


def test_error_json_response_omits_retry_after_when_unset() -> None:
    payload = build_error_response(
        error_type=ErrorType.NOT_FOUND,
        message="Not Found",
        detail="Cocktail 'margarita' is not in favorites",
        status_code=404,
        path="/api/favorites/margarita",
    )

    assert "Retry-After" not in error_json_response(payload).headers


@pytest.mark.asyncio
async def test_store_unavailable_handler_returns_503() -> None:
    token = set_request_id("req-503")
    try:
        response = await favorites_main.store_unavailable_exception_handler(
            _build_request("/api/favorites/global/popular"),
            FavoritesStoreUnavailableError("store unavailable during list_all"),
        )
    finally:
        clear_request_id(token)

    body = json.loads(response.body.decode())
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert body["error_type"] == "service_unavailable"
    assert body["request_id"] == "req-503"
    assert body["path"] == "/api/favorites/global/popular"


@pytest.mark.asyncio
async def test_database_connection_handler_uses_builder(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The DBAPI handler delegates to the shared builder."""

    called: dict[str, object] = {}
    original_builder = favorites_main.build_error_response

    def fake_builder(**kwargs):
        called["kwargs"] = kwargs
        return original_builder(**kwargs)

    monkeypatch.setattr(favorites_main, "build_error_response", fake_builder)

    response = await favorites_main.database_connection_exception_handler(
        _build_request("/api/favorites/mine"),
        DBAPIError("SELECT 1", {}, Exception("boom")),
    )

    assert called["kwargs"]["error_type"] is ErrorType.DATABASE_ERROR
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.headers["Retry-After"] == "5"
