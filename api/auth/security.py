"""
Auth security helpers.

Tokens are issued elsewhere (the user service shares JWT_SECRET); this API only
verifies access tokens and derives the caller identity from them.
"""

from __future__ import annotations

from typing import Any

import jwt

from core import settings
from core.errors import AuthenticationError

from .schemas import CallerIdentity


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return settings.env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return settings.env_str("JWT_ALG", "HS256")


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthenticationError("Access token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Access token is expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthenticationError("Token is not an access token.")

    return payload


def caller_from_token(token: str) -> CallerIdentity:
    payload = decode_access_token(token)

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise AuthenticationError("Invalid access token subject.")

    nickname = payload.get("nickname")
    return CallerIdentity(
        user_id=int(subject),
        nickname=str(nickname) if nickname else None,
    )
