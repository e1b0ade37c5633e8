"""
Shared fixtures.

The repositories are swapped for an in-memory store so service and route tests
run without Postgres. The store yields to the event loop between reads and
writes, the way a real driver call would, so interleavings are possible.
"""

from __future__ import annotations

import asyncio
import itertools
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from auth import security
from comments import repository as comments_repository
from content import repository as content_repository
from content.schemas import ContentKind, SortOrder
from core import db
from core.errors import StorageError
from reactions import repository as reactions_repository


class InMemoryStore:
    def __init__(self) -> None:
        self.items: dict[tuple[ContentKind, int], dict] = {}
        self.edges: set[tuple[str, int, str, int]] = set()
        self.comments: dict[int, dict] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count()
        self.fail_on: set[str] = set()
        self.lock_delay_s = 0.0

    async def _tick(self, op: str) -> None:
        await asyncio.sleep(0)
        if op in self.fail_on:
            raise StorageError(f"{op} failed")

    def _now(self) -> datetime:
        return datetime.fromtimestamp(1_700_000_000 + next(self._clock), tz=timezone.utc)

    # helpers for tests

    def add_item(self, kind: ContentKind = ContentKind.POST, **fields) -> dict:
        content_id = next(self._ids)
        now = self._now()
        row = {
            "id": content_id,
            "user_id": None,
            "title": "Sourdough basics",
            "body": "Flour, water, salt.",
            "author": "baker",
            "like_count": 0,
            "bookmark_count": 0,
            "created_at": now,
            "updated_at": now,
        }
        row.update(fields)
        self.items[(ContentKind(kind), content_id)] = row
        return dict(row)

    def edge_count(self, relation: str, kind: ContentKind, content_id: int) -> int:
        return sum(1 for e in self.edges if e[0] == relation and e[2] == ContentKind(kind).value and e[3] == content_id)

    # content repository

    async def get_item(self, kind, content_id, *, conn=None):
        await self._tick("get_item")
        row = self.items.get((ContentKind(kind), content_id))
        return dict(row) if row is not None else None

    async def get_items_by_ids(self, kind, content_ids):
        await self._tick("get_items_by_ids")
        return [dict(self.items[(ContentKind(kind), i)]) for i in content_ids if (ContentKind(kind), i) in self.items]

    async def lock_item(self, kind, content_id, *, conn):
        if self.lock_delay_s:
            await asyncio.sleep(self.lock_delay_s)
        return await self.get_item(kind, content_id)

    async def list_items(self, kind, *, search_query=None, limit=None, sort=SortOrder.LATEST):
        await self._tick("list_items")
        term = (search_query or "").strip().casefold()
        rows = [dict(r) for (k, _), r in self.items.items() if k == ContentKind(kind)]
        if term:
            rows = [r for r in rows if any(term in str(r[f]).casefold() for f in ("title", "body", "author"))]
        if SortOrder(sort) is SortOrder.POPULAR:
            rows.sort(key=lambda r: (r["like_count"], r["created_at"], r["id"]), reverse=True)
        else:
            rows.sort(key=lambda r: (r["created_at"], r["id"]), reverse=True)
        return rows[:limit] if limit is not None else rows

    async def create_item(self, kind, *, title, body, author, user_id):
        await self._tick("create_item")
        return self.add_item(kind, title=title, body=body, author=author, user_id=user_id)

    async def update_item(self, kind, content_id, patch):
        await self._tick("update_item")
        row = self.items.get((ContentKind(kind), content_id))
        if row is None:
            return None
        row.update({k: v for k, v in patch.items() if k in content_repository.EDITABLE_COLUMNS})
        row["updated_at"] = self._now()
        return dict(row)

    async def adjust_counter(self, kind, content_id, *, column, delta, conn=None):
        await self._tick("adjust_counter")
        row = self.items.get((ContentKind(kind), content_id))
        if row is None:
            return None
        row[column] = max(0, row[column] + delta)
        return dict(row)

    async def delete_item(self, kind, content_id, *, conn=None):
        await self._tick("delete_item")
        row = self.items.pop((ContentKind(kind), content_id), None)
        return dict(row) if row is not None else None

    # reactions repository

    @staticmethod
    def _edge(relation, user_id, kind, content_id) -> tuple[str, int, str, int]:
        return (str(getattr(relation, "value", relation)), user_id, ContentKind(kind).value, content_id)

    async def find_edge(self, relation, *, user_id, kind, content_id, conn=None):
        await self._tick("find_edge")
        return self._edge(relation, user_id, kind, content_id) in self.edges

    async def insert_edge(self, relation, *, user_id, kind, content_id, conn=None):
        await self._tick("insert_edge")
        edge = self._edge(relation, user_id, kind, content_id)
        if edge in self.edges:
            return False
        self.edges.add(edge)
        return True

    async def delete_edge(self, relation, *, user_id, kind, content_id, conn=None):
        await self._tick("delete_edge")
        edge = self._edge(relation, user_id, kind, content_id)
        if edge not in self.edges:
            return False
        self.edges.discard(edge)
        return True

    async def delete_edges_for_item(self, kind, content_id, *, conn=None):
        await self._tick("delete_edges_for_item")
        doomed = {e for e in self.edges if e[2] == ContentKind(kind).value and e[3] == content_id}
        self.edges -= doomed
        return len(doomed)

    async def list_user_edges(self, relation, *, user_id, kind=None, limit=50, offset=0):
        await self._tick("list_user_edges")
        rel = str(getattr(relation, "value", relation))
        rows = [
            {"user_id": e[1], "content_kind": e[2], "content_id": e[3], "created_at": None}
            for e in self.edges
            if e[0] == rel and e[1] == user_id and (kind is None or e[2] == ContentKind(kind).value)
        ]
        rows.sort(key=lambda r: (r["content_kind"], r["content_id"]), reverse=True)
        return rows[offset : offset + limit]

    # comments repository

    async def create_comment(self, *, kind, content_id, user_id, author, body):
        await self._tick("create_comment")
        comment_id = next(self._ids)
        row = {
            "id": comment_id,
            "content_kind": ContentKind(kind).value,
            "content_id": content_id,
            "user_id": user_id,
            "author": author,
            "body": body,
            "created_at": self._now(),
        }
        self.comments[comment_id] = row
        return dict(row)

    async def list_comments(self, *, kind, content_id, limit=50, offset=0):
        await self._tick("list_comments")
        rows = [
            dict(r)
            for r in sorted(self.comments.values(), key=lambda r: r["id"])
            if r["content_kind"] == ContentKind(kind).value and r["content_id"] == content_id
        ]
        return rows[offset : offset + limit]

    async def get_comment(self, comment_id):
        await self._tick("get_comment")
        row = self.comments.get(comment_id)
        return dict(row) if row is not None else None

    async def delete_comment(self, comment_id):
        await self._tick("delete_comment")
        row = self.comments.pop(comment_id, None)
        return dict(row) if row is not None else None

    async def delete_comments_for_item(self, kind, content_id, *, conn=None):
        await self._tick("delete_comments_for_item")
        doomed = [
            cid
            for cid, r in self.comments.items()
            if r["content_kind"] == ContentKind(kind).value and r["content_id"] == content_id
        ]
        for cid in doomed:
            del self.comments[cid]
        return len(doomed)


_PATCHED = {
    content_repository: (
        "get_item",
        "get_items_by_ids",
        "lock_item",
        "list_items",
        "create_item",
        "update_item",
        "adjust_counter",
        "delete_item",
    ),
    reactions_repository: (
        "find_edge",
        "insert_edge",
        "delete_edge",
        "delete_edges_for_item",
        "list_user_edges",
    ),
    comments_repository: (
        "create_comment",
        "list_comments",
        "get_comment",
        "delete_comment",
        "delete_comments_for_item",
    ),
}


@asynccontextmanager
async def _fake_transaction():
    yield None


@pytest.fixture()
def store(monkeypatch) -> InMemoryStore:
    fake = InMemoryStore()
    for module, names in _PATCHED.items():
        for name in names:
            monkeypatch.setattr(module, name, getattr(fake, name))
    monkeypatch.setattr(db, "transaction", _fake_transaction)
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    return fake


def mint_access_token(*, user_id: int, nickname: str | None = None, expires_in_s: int = 900) -> str:
    # Stands in for the user service that issues tokens with the shared secret.
    issued_at = int(time.time())
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + expires_in_s,
    }
    if nickname:
        payload["nickname"] = nickname
    return jwt.encode(payload, security.jwt_secret(), algorithm=security.jwt_algorithm())


@pytest.fixture()
def token():
    def _make(user_id: int = 1, nickname: str | None = "baker", **kwargs) -> str:
        return mint_access_token(user_id=user_id, nickname=nickname, **kwargs)

    return _make


@pytest.fixture()
def auth_header(token):
    def _make(user_id: int = 1, nickname: str | None = "baker") -> dict[str, str]:
        return {"Authorization": f"Bearer {token(user_id, nickname)}"}

    return _make


@pytest.fixture()
def client(store) -> TestClient:
    # No context manager: the lifespan (and its DB pool) is never started.
    from main import app

    return TestClient(app)
