"""
Relation edge persistence (raw SQL).

`likes` and `bookmarks` share one shape: (user_id, content_kind, content_id)
is the primary key, so a duplicate edge cannot be stored.
"""

from __future__ import annotations

import asyncpg

from content.schemas import ContentKind
from core import db

from .schemas import Relation

_TABLES: dict[Relation, str] = {
    Relation.LIKE: "likes",
    Relation.BOOKMARK: "bookmarks",
}


def table_for(relation: Relation) -> str:
    return _TABLES[Relation(relation)]


async def find_edge(
    relation: Relation,
    *,
    user_id: int,
    kind: ContentKind,
    content_id: int,
    conn: asyncpg.Connection | None = None,
) -> bool:
    row = await db.fetch_one(
        f"""
        SELECT 1 AS ok
        FROM {table_for(relation)}
        WHERE user_id = $1
          AND content_kind = $2
          AND content_id = $3
        """,
        user_id,
        ContentKind(kind).value,
        content_id,
        conn=conn,
    )
    return row is not None


async def insert_edge(
    relation: Relation,
    *,
    user_id: int,
    kind: ContentKind,
    content_id: int,
    conn: asyncpg.Connection | None = None,
) -> bool:
    row = await db.fetch_one(
        f"""
        INSERT INTO {table_for(relation)} (user_id, content_kind, content_id)
        VALUES ($1, $2, $3)
        ON CONFLICT DO NOTHING
        RETURNING user_id
        """,
        user_id,
        ContentKind(kind).value,
        content_id,
        conn=conn,
    )
    return row is not None


async def delete_edge(
    relation: Relation,
    *,
    user_id: int,
    kind: ContentKind,
    content_id: int,
    conn: asyncpg.Connection | None = None,
) -> bool:
    row = await db.fetch_one(
        f"""
        DELETE FROM {table_for(relation)}
        WHERE user_id = $1
          AND content_kind = $2
          AND content_id = $3
        RETURNING user_id
        """,
        user_id,
        ContentKind(kind).value,
        content_id,
        conn=conn,
    )
    return row is not None


async def delete_edges_for_item(
    kind: ContentKind,
    content_id: int,
    *,
    conn: asyncpg.Connection | None = None,
) -> int:
    removed = 0
    for relation in Relation:
        status = await db.execute(
            f"""
            DELETE FROM {table_for(relation)}
            WHERE content_kind = $1
              AND content_id = $2
            """,
            ContentKind(kind).value,
            content_id,
            conn=conn,
        )
        removed += db.affected_rows(status)
    return removed


async def list_user_edges(
    relation: Relation,
    *,
    user_id: int,
    kind: ContentKind | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT user_id, content_kind, content_id, created_at
        FROM {table_for(relation)}
        WHERE user_id = $1
          AND ($2::text IS NULL OR content_kind = $2)
        ORDER BY created_at DESC, content_id DESC
        LIMIT $3
        OFFSET $4
        """,
        user_id,
        ContentKind(kind).value if kind is not None else None,
        limit,
        offset,
    )
