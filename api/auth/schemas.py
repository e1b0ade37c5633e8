"""
Auth schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CallerIdentity(BaseModel):
    """
    Who is calling, as decoded from the bearer token. Never persisted.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    nickname: str | None = None
