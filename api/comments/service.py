"""
Comment business logic.
"""

from __future__ import annotations

from auth.schemas import CallerIdentity
from content import repository as content_repository
from content import service as content_service
from content.schemas import ContentKind
from core.errors import ForbiddenError, NotFoundError, ValidationError

from . import repository, schemas


def _to_comment_response(row: dict) -> schemas.CommentResponse:
    return schemas.CommentResponse(
        id=int(row["id"]),
        kind=ContentKind(row["content_kind"]),
        content_id=int(row["content_id"]),
        user_id=int(row["user_id"]),
        author=str(row["author"]),
        body=str(row["body"]),
        created_at=row.get("created_at"),
    )


async def create_comment(
    payload: schemas.CommentCreateRequest,
    *,
    caller: CallerIdentity,
) -> schemas.CommentResponse:
    body = payload.body.strip()
    if not body:
        raise ValidationError("Comment body is empty.")

    if await content_repository.get_item(payload.kind, payload.content_id) is None:
        raise content_service.not_found(payload.kind, payload.content_id)

    row = await repository.create_comment(
        kind=payload.kind,
        content_id=payload.content_id,
        user_id=caller.user_id,
        author=caller.nickname or f"user-{caller.user_id}",
        body=body,
    )
    return _to_comment_response(row)


async def list_comments(
    kind: ContentKind,
    content_id: int,
    *,
    limit: int | None = None,
    offset: int = 0,
) -> list[schemas.CommentResponse]:
    rows = await repository.list_comments(
        kind=kind,
        content_id=content_id,
        limit=content_service.clamp_limit(limit),
        offset=max(0, offset),
    )
    return [_to_comment_response(row) for row in rows]


async def delete_comment(comment_id: int, *, caller: CallerIdentity) -> schemas.CommentResponse:
    row = await repository.get_comment(comment_id)
    if row is None:
        raise NotFoundError(f"Comment {comment_id} not found.")
    if int(row["user_id"]) != caller.user_id:
        raise ForbiddenError("Only the author can delete this comment.")

    deleted = await repository.delete_comment(comment_id)
    if deleted is None:
        raise NotFoundError(f"Comment {comment_id} not found.")
    return _to_comment_response(deleted)
