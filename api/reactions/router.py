"""
Like/bookmark API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from auth.schemas import CallerIdentity
from content.router import ContentIdPath
from content.schemas import ContentItem, ContentKind

from . import service
from .schemas import Relation, RelationStatus, ToggleResult


def build_router(kind: ContentKind) -> APIRouter:
    """
    Toggle and status routes for one content kind, mounted next to its CRUD routes.
    """
    router = APIRouter()

    @router.post("/{content_id}/like")
    async def toggle_like(
        content_id: ContentIdPath,
        current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
    ) -> ToggleResult:
        return await service.toggle(
            Relation.LIKE,
            user_id=current_user.user_id,
            kind=kind,
            content_id=content_id,
        )

    @router.post("/{content_id}/bookmark")
    async def toggle_bookmark(
        content_id: ContentIdPath,
        current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
    ) -> ToggleResult:
        return await service.toggle(
            Relation.BOOKMARK,
            user_id=current_user.user_id,
            kind=kind,
            content_id=content_id,
        )

    @router.get("/{content_id}/like")
    async def like_status(
        content_id: ContentIdPath,
        current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
    ) -> RelationStatus:
        return await service.relation_status(Relation.LIKE, kind, content_id, caller=current_user)

    @router.get("/{content_id}/bookmark")
    async def bookmark_status(
        content_id: ContentIdPath,
        current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
    ) -> RelationStatus:
        return await service.relation_status(Relation.BOOKMARK, kind, content_id, caller=current_user)

    return router


router = APIRouter()


@router.get("/likes")
async def list_likes(
    kind: ContentKind | None = None,
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(0, ge=0),
    current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
) -> dict:
    items: list[ContentItem] = await service.list_user_items(
        Relation.LIKE,
        caller=current_user,
        kind=kind,
        limit=limit,
        offset=offset,
    )
    return {"items": items, "count": len(items)}


@router.get("/bookmarks")
async def list_bookmarks(
    kind: ContentKind | None = None,
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(0, ge=0),
    current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
) -> dict:
    items: list[ContentItem] = await service.list_user_items(
        Relation.BOOKMARK,
        caller=current_user,
        kind=kind,
        limit=limit,
        offset=offset,
    )
    return {"items": items, "count": len(items)}
