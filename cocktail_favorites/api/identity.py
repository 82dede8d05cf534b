"""Caller identity and capability checks resolved from bearer tokens.

Every favorites route expects ``Authorization: Bearer <jwt>``. The token is
verified against ``JWT_KEY`` and must carry the configured issuer and audience
and an unexpired ``exp``. The user id is read from ``sub`` (or the
``nameidentifier`` claim written by ASP.NET issuers) and roles from ``role``,
``roles`` or the long-form role claim.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cocktail_favorites.settings import AppSettings, get_settings
from cocktail_favorites.utils.request_context import get_request_id, set_caller_id

logger = logging.getLogger(__name__)

NAME_IDENTIFIER_CLAIM = (
    "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/nameidentifier"
)
ROLE_CLAIM = "http://schemas.microsoft.com/ws/2008/06/identity/claims/role"

_USER_ID_CLAIMS = ("sub", NAME_IDENTIFIER_CLAIM)
_ROLE_CLAIMS = ("role", "roles", ROLE_CLAIM)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    user_id: str
    roles: frozenset[str]

    def has_role(self, role: str) -> bool:
        return role.strip().lower() in self.roles


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _collect_roles(claims: dict[str, Any]) -> frozenset[str]:
    roles: set[str] = set()
    for name in _ROLE_CLAIMS:
        value = claims.get(name)
        if value is None:
            continue
        values: Iterable[Any] = [value] if isinstance(value, str) else value
        roles.update(str(role).strip().lower() for role in values if str(role).strip())
    return frozenset(roles)


def decode_caller(token: str, settings: AppSettings) -> Caller:
    """Verify ``token`` and return the caller it identifies.

    Raises:
        HTTPException: 401 when the token is invalid, expired, issued for
            another audience or issuer, or names no user.
    """

    if not settings.jwt_configured:
        logger.error("Bearer token received but JWT_KEY/ISSUER/AUDIENCE are unset")
        raise _unauthorized("Token validation is not configured")

    try:
        claims = jwt.decode(
            token,
            settings.jwt_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iss", "aud"]},
        )
    except jwt.PyJWTError as exc:
        logger.info("Request %s: rejected bearer token: %s", get_request_id(), exc)
        raise _unauthorized("Invalid or expired token") from exc

    user_id = next(
        (
            str(claims[name]).strip()
            for name in _USER_ID_CLAIMS
            if str(claims.get(name) or "").strip()
        ),
        "",
    )
    if not user_id:
        raise _unauthorized("Token does not identify a user")
    return Caller(user_id=user_id, roles=_collect_roles(claims))


async def get_current_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: AppSettings = Depends(get_settings),
) -> Caller:
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Missing bearer token")
    caller = decode_caller(credentials.credentials, settings)
    set_caller_id(caller.user_id)
    return caller


async def get_current_user_id(caller: Caller = Depends(get_current_caller)) -> str:
    """Return the authenticated user's id or reject the request with 401."""

    return caller.user_id


def require_trend_access(
    caller: Caller = Depends(get_current_caller),
    settings: AppSettings = Depends(get_settings),
) -> str:
    """Allow only callers holding the configured trend role."""

    if not caller.has_role(settings.trend_required_role):
        logger.warning(
            "Request %s: user %s lacks role '%s' for trend access",
            get_request_id(),
            caller.user_id,
            settings.trend_required_role,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role '{settings.trend_required_role}' required",
        )
    return caller.user_id


__all__ = [
    "Caller",
    "decode_caller",
    "get_current_caller",
    "get_current_user_id",
    "require_trend_access",
]
