"""
Comment API schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from content.schemas import MAX_ID, ContentKind


class CommentCreateRequest(BaseModel):
    kind: ContentKind
    content_id: int = Field(..., ge=1, le=MAX_ID)
    body: str = Field(..., min_length=1, max_length=5_000)


class CommentResponse(BaseModel):
    id: int
    kind: ContentKind
    content_id: int
    user_id: int
    author: str
    body: str
    created_at: datetime | None = None
