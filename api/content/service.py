"""
Content business logic.

Thin orchestration over the content repository: limits, ownership checks and
the cascade on delete. Like/bookmark logic lives in `reactions/`.
"""

from __future__ import annotations

import logging

from auth.schemas import CallerIdentity
from comments import repository as comments_repository
from core import db, settings
from core.errors import ForbiddenError, NotFoundError, ValidationError
from reactions import repository as reactions_repository

from . import repository, schemas
from .schemas import ContentItem, ContentKind, SortOrder

logger = logging.getLogger(__name__)

_LABELS = {
    ContentKind.POST: "Post",
    ContentKind.MAGAZINE: "Magazine post",
    ContentKind.RECIPE: "Recipe",
    ContentKind.REVIEW: "Review",
}


def to_content_item(kind: ContentKind, row: dict) -> ContentItem:
    return ContentItem(
        id=int(row["id"]),
        kind=kind,
        user_id=int(row["user_id"]) if row.get("user_id") is not None else None,
        title=str(row["title"]),
        body=str(row.get("body") or ""),
        author=str(row.get("author") or ""),
        like_count=int(row.get("like_count") or 0),
        bookmark_count=int(row.get("bookmark_count") or 0),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def not_found(kind: ContentKind, content_id: int) -> NotFoundError:
    return NotFoundError(f"{_LABELS[ContentKind(kind)]} {content_id} not found.")


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return settings.default_list_limit()
    return max(1, min(int(limit), settings.max_list_limit()))


def _check_owner(row: dict, caller: CallerIdentity) -> None:
    owner_id = row.get("user_id")
    if owner_id is not None and int(owner_id) != caller.user_id:
        raise ForbiddenError("Only the author can modify this item.")


async def get_item(kind: ContentKind, content_id: int) -> ContentItem:
    row = await repository.get_item(kind, content_id)
    if row is None:
        raise not_found(kind, content_id)
    return to_content_item(kind, row)


async def list_items(
    kind: ContentKind,
    *,
    search_query: str | None = None,
    limit: int | None = None,
    sort: SortOrder = SortOrder.LATEST,
) -> list[ContentItem]:
    rows = await repository.list_items(
        kind,
        search_query=search_query,
        limit=clamp_limit(limit),
        sort=sort,
    )
    return [to_content_item(kind, row) for row in rows]


async def create_item(
    kind: ContentKind,
    payload: schemas.ContentCreateRequest,
    *,
    caller: CallerIdentity,
) -> ContentItem:
    author = (payload.author or caller.nickname or "").strip()
    if not author:
        raise ValidationError("author is required when the token carries no nickname.")

    row = await repository.create_item(
        kind,
        title=payload.title.strip(),
        body=payload.body,
        author=author,
        user_id=caller.user_id,
    )
    logger.info("Created %s %s", kind.value, row["id"], extra={"kind": kind.value, "user_id": caller.user_id})
    return to_content_item(kind, row)


async def update_item(
    kind: ContentKind,
    content_id: int,
    payload: schemas.ContentUpdateRequest,
    *,
    caller: CallerIdentity,
) -> ContentItem:
    patch = payload.model_dump(exclude_none=True)
    if not patch:
        raise ValidationError("Provide at least one of: title, body, author.")

    existing = await repository.get_item(kind, content_id)
    if existing is None:
        raise not_found(kind, content_id)
    _check_owner(existing, caller)

    row = await repository.update_item(kind, content_id, patch)
    if row is None:
        raise not_found(kind, content_id)
    return to_content_item(kind, row)


async def _delete_with_edges(kind: ContentKind, content_id: int) -> dict | None:
    # Edges and comments go in the same transaction as the item.
    async with db.transaction() as conn:
        row = await repository.delete_item(kind, content_id, conn=conn)
        if row is None:
            return None
        await reactions_repository.delete_edges_for_item(kind, content_id, conn=conn)
        await comments_repository.delete_comments_for_item(kind, content_id, conn=conn)
    return row


async def delete_item(kind: ContentKind, content_id: int, *, caller: CallerIdentity) -> ContentItem:
    existing = await repository.get_item(kind, content_id)
    if existing is None:
        raise not_found(kind, content_id)
    _check_owner(existing, caller)

    row = await _delete_with_edges(kind, content_id)
    if row is None:
        raise not_found(kind, content_id)
    logger.info("Deleted %s %s", kind.value, content_id, extra={"kind": kind.value, "user_id": caller.user_id})
    return to_content_item(kind, row)


async def delete_items(kind: ContentKind, content_ids: list[int], *, caller: CallerIdentity) -> dict:
    """
    Delete several items. Ids that are missing or owned by someone else are
    reported as skipped instead of failing the whole batch.
    """
    deleted: list[int] = []
    skipped: list[int] = []
    for content_id in dict.fromkeys(content_ids):
        existing = await repository.get_item(kind, content_id)
        if existing is None or (
            existing.get("user_id") is not None and int(existing["user_id"]) != caller.user_id
        ):
            skipped.append(content_id)
            continue
        row = await _delete_with_edges(kind, content_id)
        if row is None:
            skipped.append(content_id)
        else:
            deleted.append(content_id)
    return {"deleted": deleted, "skipped": skipped, "count": len(deleted)}
