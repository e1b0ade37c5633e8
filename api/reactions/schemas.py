"""
Like/bookmark schemas.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from content.schemas import ContentItem, ContentKind


class Relation(str, Enum):
    LIKE = "like"
    BOOKMARK = "bookmark"

    @property
    def counter_column(self) -> str:
        return f"{self.value}_count"


class ToggleKey(BaseModel):
    """
    Identifies one relation edge: who, which item, which relation.
    """

    model_config = ConfigDict(frozen=True)

    relation: Relation
    user_id: int
    kind: ContentKind
    content_id: int


class ToggleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    relation: Relation
    active: bool
    item: ContentItem


class ContentStatusView(BaseModel):
    """
    Read-only projection of an item joined with the caller's relation flags.
    """

    model_config = ConfigDict(frozen=True)

    item: ContentItem
    is_liked: bool = False
    is_bookmarked: bool = False

    def as_response(self) -> dict[str, Any]:
        # Flat shape: item fields plus the two flags.
        return {
            **self.item.model_dump(mode="json"),
            "is_liked": self.is_liked,
            "is_bookmarked": self.is_bookmarked,
        }


class RelationStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    relation: Relation
    active: bool
    item: ContentItem
