"""
Comment persistence (raw SQL).
"""

from __future__ import annotations

import asyncpg

from content.schemas import ContentKind
from core import db

COMMENT_COLUMNS = "id, content_kind, content_id, user_id, author, body, created_at"


async def create_comment(
    *,
    kind: ContentKind,
    content_id: int,
    user_id: int,
    author: str,
    body: str,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO comments (content_kind, content_id, user_id, author, body)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING {COMMENT_COLUMNS}
        """,
        ContentKind(kind).value,
        content_id,
        user_id,
        author,
        body,
    )
    if row is None:
        raise RuntimeError("Failed to create comment.")
    return row


async def list_comments(*, kind: ContentKind, content_id: int, limit: int = 50, offset: int = 0) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {COMMENT_COLUMNS}
        FROM comments
        WHERE content_kind = $1
          AND content_id = $2
        ORDER BY created_at ASC, id ASC
        LIMIT $3
        OFFSET $4
        """,
        ContentKind(kind).value,
        content_id,
        limit,
        offset,
    )


async def get_comment(comment_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {COMMENT_COLUMNS}
        FROM comments
        WHERE id = $1
        """,
        comment_id,
    )


async def delete_comment(comment_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        DELETE FROM comments
        WHERE id = $1
        RETURNING {COMMENT_COLUMNS}
        """,
        comment_id,
    )


async def delete_comments_for_item(
    kind: ContentKind,
    content_id: int,
    *,
    conn: asyncpg.Connection | None = None,
) -> int:
    status = await db.execute(
        """
        DELETE FROM comments
        WHERE content_kind = $1
          AND content_id = $2
        """,
        ContentKind(kind).value,
        content_id,
        conn=conn,
    )
    return db.affected_rows(status)
