"""
Comment API endpoints.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from auth import dependencies as auth_dependencies
from auth.schemas import CallerIdentity
from content.schemas import MAX_ID, ContentKind

from . import schemas, service

router = APIRouter()


@router.post("/comments", status_code=status.HTTP_201_CREATED)
async def create_comment(
    request: schemas.CommentCreateRequest,
    current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
) -> schemas.CommentResponse:
    return await service.create_comment(request, caller=current_user)


@router.get("/comments")
async def list_comments(
    kind: ContentKind,
    content_id: int = Query(..., ge=1, le=MAX_ID),
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(0, ge=0),
) -> dict:
    comments = await service.list_comments(kind, content_id, limit=limit, offset=offset)
    return {"comments": comments, "count": len(comments)}


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    current_user: CallerIdentity = Depends(auth_dependencies.get_current_user),
) -> schemas.CommentResponse:
    return await service.delete_comment(comment_id, caller=current_user)
