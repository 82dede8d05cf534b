"""Request-scoped context shared by middleware, handlers and log statements.

The HTTP middleware assigns each inbound call a request identifier and, once
the gateway headers are resolved, the caller's user identifier. Both live in
``ContextVar`` instances so every coroutine handling the request sees its own
values without any module-level mutable state.
"""

from __future__ import annotations

from contextvars import ContextVar, Token

__all__ = [
    "CALLER_ID_CONTEXT",
    "REQUEST_ID_CONTEXT",
    "clear_request_id",
    "get_caller_id",
    "get_request_id",
    "set_caller_id",
    "set_request_id",
]

REQUEST_ID_CONTEXT: ContextVar[str] = ContextVar("request_id", default="")
CALLER_ID_CONTEXT: ContextVar[str] = ContextVar("caller_id", default="")


def set_request_id(request_id: str) -> Token[str]:
    """Store the request identifier; the token lets tests restore the old value."""

    return REQUEST_ID_CONTEXT.set(request_id)


def get_request_id() -> str:
    """Return the active request identifier, or an empty string outside requests."""

    return REQUEST_ID_CONTEXT.get()


def clear_request_id(token: Token[str] | None = None) -> None:
    """Reset the request identifier, optionally to the value captured by ``token``."""

    if token is not None:
        REQUEST_ID_CONTEXT.reset(token)
    else:
        REQUEST_ID_CONTEXT.set("")


def set_caller_id(user_id: str) -> Token[str]:
    return CALLER_ID_CONTEXT.set(user_id)


def get_caller_id() -> str:
    return CALLER_ID_CONTEXT.get()
