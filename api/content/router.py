"""
Content API endpoints.

One router per content kind; `main.py` mounts them under /api/posts,
/api/magazines, /api/recipes and /api/reviews.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from auth import dependencies as auth_dependencies
from auth.schemas import CallerIdentity
from reactions import service as reactions_service

from . import schemas, service
from .schemas import MAX_ID, ContentKind, SortOrder

ContentIdPath = Annotated[int, Path(ge=1, le=MAX_ID)]


def build_router(kind: ContentKind) -> APIRouter:
    router = APIRouter()

    @router.post("/", status_code=status.HTTP_201_CREATED)
    async def create_item(
        request: schemas.ContentCreateRequest,
        current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
    ) -> schemas.ContentItem:
        return await service.create_item(kind, request, caller=current_user)

    @router.get("/")
    async def list_items(
        q: str | None = Query(default=None, max_length=200),
        limit: int | None = Query(default=None, ge=1),
        sort: SortOrder = SortOrder.LATEST,
    ) -> list[schemas.ContentItem]:
        return await service.list_items(kind, search_query=q, limit=limit, sort=sort)

    @router.post("/delete")
    async def delete_items(
        request: schemas.BulkDeleteRequest,
        current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
    ) -> dict:
        return await service.delete_items(kind, request.ids, caller=current_user)

    @router.get("/{content_id}")
    async def get_item(
        content_id: ContentIdPath,
        caller: CallerIdentity | None = Depends(auth_dependencies.get_optional_user),
    ) -> dict:
        view = await reactions_service.resolve_status(kind, content_id, caller)
        return view.as_response()

    @router.put("/{content_id}")
    async def update_item(
        content_id: ContentIdPath,
        request: schemas.ContentUpdateRequest,
        current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
    ) -> schemas.ContentItem:
        return await service.update_item(kind, content_id, request, caller=current_user)

    @router.delete("/{content_id}")
    async def delete_item(
        content_id: ContentIdPath,
        current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
    ) -> schemas.ContentItem:
        return await service.delete_item(kind, content_id, caller=current_user)

    return router
