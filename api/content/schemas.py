"""
Content API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


# Ids are Postgres BIGSERIAL values.
MAX_ID = 2**63 - 1

ItemId = Annotated[int, Field(ge=1, le=MAX_ID)]


class ContentKind(str, Enum):
    POST = "post"
    MAGAZINE = "magazine"
    RECIPE = "recipe"
    REVIEW = "review"


class SortOrder(str, Enum):
    LATEST = "latest"
    POPULAR = "popular"


class ContentCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(default="", max_length=50_000)
    # Falls back to the caller's nickname when omitted.
    author: str | None = Field(default=None, min_length=1, max_length=100)


class ContentUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    body: str | None = Field(default=None, max_length=50_000)
    author: str | None = Field(default=None, min_length=1, max_length=100)


class BulkDeleteRequest(BaseModel):
    ids: list[ItemId] = Field(..., min_length=1, max_length=100)


class ContentItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    kind: ContentKind
    user_id: int | None = None
    title: str
    body: str
    author: str
    like_count: int = Field(default=0, ge=0)
    bookmark_count: int = Field(default=0, ge=0)
    created_at: datetime | None = None
    updated_at: datetime | None = None
