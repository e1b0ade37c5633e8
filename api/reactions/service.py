"""
Like/bookmark toggles and the per-caller status join.

Toggle:
- one transaction locks the content row, flips the edge and moves the paired
  counter by exactly one (`apply_toggle`)
- toggles on the same key are also serialized in-process and bounded by
  TOGGLE_TIMEOUT_S; expiry is a retryable StorageError

Status:
- anonymous callers (no token) always get both flags False
- reads are lock-free and may see the state just before or after a toggle
"""

from __future__ import annotations

import asyncio
import logging

from auth.schemas import CallerIdentity
from content import repository as content_repository
from content import service as content_service
from content.schemas import ContentItem, ContentKind
from core import db, settings
from core.errors import StorageError
from core.locks import KeyedLock

from . import repository
from .schemas import ContentStatusView, Relation, RelationStatus, ToggleKey, ToggleResult

logger = logging.getLogger(__name__)

_toggle_locks = KeyedLock()


async def apply_toggle(key: ToggleKey) -> tuple[bool, dict]:
    """
    Flip one edge and its counter as a single unit.

    Returns the new edge state and the updated item row (carrying the new count).
    Raises NotFoundError, with nothing written, when the item does not exist.
    """
    async with db.transaction() as conn:
        item_row = await content_repository.lock_item(key.kind, key.content_id, conn=conn)
        if item_row is None:
            raise content_service.not_found(key.kind, key.content_id)

        edge = {"user_id": key.user_id, "kind": key.kind, "content_id": key.content_id}
        exists = await repository.find_edge(key.relation, conn=conn, **edge)
        # The counter only moves when the edge write actually changed a row.
        if exists:
            removed = await repository.delete_edge(key.relation, conn=conn, **edge)
            delta = -1 if removed else 0
        else:
            inserted = await repository.insert_edge(key.relation, conn=conn, **edge)
            delta = 1 if inserted else 0

        updated = await content_repository.adjust_counter(
            key.kind,
            key.content_id,
            column=key.relation.counter_column,
            delta=delta,
            conn=conn,
        )
        if updated is None:
            raise content_service.not_found(key.kind, key.content_id)
    return not exists, updated


async def _toggle_serialized(key: ToggleKey) -> tuple[bool, dict]:
    async with _toggle_locks.hold(key):
        return await apply_toggle(key)


async def toggle(
    relation: Relation,
    *,
    user_id: int,
    kind: ContentKind,
    content_id: int,
) -> ToggleResult:
    key = ToggleKey(relation=relation, user_id=user_id, kind=kind, content_id=content_id)
    timeout_s = settings.toggle_timeout_s()
    try:
        active, row = await asyncio.wait_for(_toggle_serialized(key), timeout=timeout_s)
    except asyncio.TimeoutError as exc:
        logger.warning(
            "Toggle timed out after %.1fs",
            timeout_s,
            extra={"relation": relation.value, "kind": kind.value, "content_id": content_id, "user_id": user_id},
        )
        raise StorageError("Toggle timed out, try again.", retryable=True) from exc

    item = content_service.to_content_item(kind, row)
    logger.info(
        "%s %s on %s %s -> %s",
        relation.value,
        "on" if active else "off",
        kind.value,
        content_id,
        getattr(item, relation.counter_column),
        extra={"relation": relation.value, "kind": kind.value, "content_id": content_id, "user_id": user_id},
    )
    return ToggleResult(relation=relation, active=active, item=item)


async def resolve_status(
    kind: ContentKind,
    content_id: int,
    caller: CallerIdentity | None,
) -> ContentStatusView:
    item = await content_service.get_item(kind, content_id)
    if caller is None:
        return ContentStatusView(item=item)

    edge = {"user_id": caller.user_id, "kind": kind, "content_id": content_id}
    is_liked = await repository.find_edge(Relation.LIKE, **edge)
    is_bookmarked = await repository.find_edge(Relation.BOOKMARK, **edge)
    return ContentStatusView(item=item, is_liked=is_liked, is_bookmarked=is_bookmarked)


async def relation_status(
    relation: Relation,
    kind: ContentKind,
    content_id: int,
    *,
    caller: CallerIdentity,
) -> RelationStatus:
    item = await content_service.get_item(kind, content_id)
    active = await repository.find_edge(
        relation,
        user_id=caller.user_id,
        kind=kind,
        content_id=content_id,
    )
    return RelationStatus(relation=relation, active=active, item=item)


async def list_user_items(
    relation: Relation,
    *,
    caller: CallerIdentity,
    kind: ContentKind | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[ContentItem]:
    """
    Items the caller liked/bookmarked, newest edge first.

    Edges whose item has been deleted are skipped.
    """
    edges = await repository.list_user_edges(
        relation,
        user_id=caller.user_id,
        kind=kind,
        limit=content_service.clamp_limit(limit),
        offset=max(0, offset),
    )

    ids_by_kind: dict[ContentKind, list[int]] = {}
    for edge in edges:
        ids_by_kind.setdefault(ContentKind(edge["content_kind"]), []).append(int(edge["content_id"]))

    rows_by_key: dict[tuple[ContentKind, int], dict] = {}
    for edge_kind, ids in ids_by_kind.items():
        for row in await content_repository.get_items_by_ids(edge_kind, ids):
            rows_by_key[(edge_kind, int(row["id"]))] = row

    items: list[ContentItem] = []
    for edge in edges:
        key = (ContentKind(edge["content_kind"]), int(edge["content_id"]))
        row = rows_by_key.get(key)
        if row is not None:
            items.append(content_service.to_content_item(key[0], row))
    return items
