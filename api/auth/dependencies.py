"""
Auth dependencies for FastAPI routes.

Token policy, applied to every route:
- no Authorization header -> anonymous (optional routes) or 401 (protected routes)
- header present but malformed, invalid or expired -> 401, never anonymous
"""

from __future__ import annotations

from fastapi import Depends, Header

from core.errors import AuthenticationError

from . import security
from .schemas import CallerIdentity


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise AuthenticationError("Missing Authorization header.")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise AuthenticationError("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise AuthenticationError("Authorization must be: Bearer <token>.")
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_optional_bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    if authorization is None:
        return None
    return _extract_bearer_token(authorization)


async def get_current_user(access_token: str = Depends(get_bearer_token)) -> CallerIdentity:
    return security.caller_from_token(access_token)


async def get_optional_user(
    access_token: str | None = Depends(get_optional_bearer_token),
) -> CallerIdentity | None:
    if access_token is None:
        return None
    return security.caller_from_token(access_token)
