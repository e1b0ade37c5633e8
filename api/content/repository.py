"""
Content persistence (raw SQL).

Posts, magazine posts, recipes and reviews share one row shape and live in one table
each; `kind` picks the table. Table and column names are never taken from user
input, only from the whitelists below.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

from .schemas import ContentKind, SortOrder

_TABLES: dict[ContentKind, str] = {
    ContentKind.POST: "posts",
    ContentKind.MAGAZINE: "magazine_posts",
    ContentKind.RECIPE: "recipes",
    ContentKind.REVIEW: "reviews",
}

_ORDER_BY: dict[SortOrder, str] = {
    SortOrder.LATEST: "created_at DESC, id DESC",
    SortOrder.POPULAR: "like_count DESC, created_at DESC, id DESC",
}

COUNTER_COLUMNS = frozenset({"like_count", "bookmark_count"})
EDITABLE_COLUMNS = ("title", "body", "author")

ITEM_COLUMNS = "id, user_id, title, body, author, like_count, bookmark_count, created_at, updated_at"


def table_for(kind: ContentKind) -> str:
    return _TABLES[ContentKind(kind)]


def like_pattern(search_query: str | None) -> str | None:
    """
    Build an ILIKE pattern for a case-insensitive substring match.

    LIKE wildcards in the term are escaped so "50%" matches literally.
    """
    term = (search_query or "").strip()
    if not term:
        return None
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def get_item(kind: ContentKind, content_id: int, *, conn: asyncpg.Connection | None = None) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {ITEM_COLUMNS}
        FROM {table_for(kind)}
        WHERE id = $1
        """,
        content_id,
        conn=conn,
    )


async def get_items_by_ids(kind: ContentKind, content_ids: list[int]) -> list[dict]:
    if not content_ids:
        return []
    return await db.fetch_all(
        f"""
        SELECT {ITEM_COLUMNS}
        FROM {table_for(kind)}
        WHERE id = ANY($1::bigint[])
        """,
        content_ids,
    )


async def lock_item(kind: ContentKind, content_id: int, *, conn: asyncpg.Connection) -> dict | None:
    """
    Read the row and hold its lock until the surrounding transaction ends.
    """
    return await db.fetch_one(
        f"""
        SELECT {ITEM_COLUMNS}
        FROM {table_for(kind)}
        WHERE id = $1
        FOR UPDATE
        """,
        content_id,
        conn=conn,
    )


async def list_items(
    kind: ContentKind,
    *,
    search_query: str | None = None,
    limit: int | None = None,
    sort: SortOrder = SortOrder.LATEST,
) -> list[dict]:
    # LIMIT NULL means no limit in Postgres.
    return await db.fetch_all(
        f"""
        SELECT {ITEM_COLUMNS}
        FROM {table_for(kind)}
        WHERE $1::text IS NULL
           OR title ILIKE $1
           OR body ILIKE $1
           OR author ILIKE $1
        ORDER BY {_ORDER_BY[SortOrder(sort)]}
        LIMIT $2
        """,
        like_pattern(search_query),
        limit,
    )


async def create_item(
    kind: ContentKind,
    *,
    title: str,
    body: str,
    author: str,
    user_id: int | None,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO {table_for(kind)} (user_id, title, body, author)
        VALUES ($1, $2, $3, $4)
        RETURNING {ITEM_COLUMNS}
        """,
        user_id,
        title,
        body,
        author,
    )
    if row is None:
        raise RuntimeError("Failed to create content item.")
    return row


async def update_item(kind: ContentKind, content_id: int, patch: dict[str, Any]) -> dict | None:
    columns = [c for c in EDITABLE_COLUMNS if c in patch]
    if not columns:
        return await get_item(kind, content_id)

    assignments = ", ".join(f"{column} = ${i}" for i, column in enumerate(columns, start=2))
    return await db.fetch_one(
        f"""
        UPDATE {table_for(kind)}
        SET {assignments},
            updated_at = now()
        WHERE id = $1
        RETURNING {ITEM_COLUMNS}
        """,
        content_id,
        *[patch[c] for c in columns],
    )


async def adjust_counter(
    kind: ContentKind,
    content_id: int,
    *,
    column: str,
    delta: int,
    conn: asyncpg.Connection | None = None,
) -> dict | None:
    """
    Add `delta` to a counter column, clamped at zero.
    """
    if column not in COUNTER_COLUMNS:
        raise ValueError(f"Unknown counter column: {column}")
    return await db.fetch_one(
        f"""
        UPDATE {table_for(kind)}
        SET {column} = GREATEST({column} + $2, 0)
        WHERE id = $1
        RETURNING {ITEM_COLUMNS}
        """,
        content_id,
        delta,
        conn=conn,
    )


async def delete_item(kind: ContentKind, content_id: int, *, conn: asyncpg.Connection | None = None) -> dict | None:
    return await db.fetch_one(
        f"""
        DELETE FROM {table_for(kind)}
        WHERE id = $1
        RETURNING {ITEM_COLUMNS}
        """,
        content_id,
        conn=conn,
    )
