"""Data helpers shared by the test modules."""

from __future__ import annotations

import itertools
from datetime import datetime

from httpx import AsyncClient

from inkwell.auth.jwt import create_access_token
from inkwell.config import Settings
from inkwell.database import Database
from inkwell.db.base import utcnow
from inkwell.db.models import Post, Reply, User

_emails = itertools.count(1)


async def create_user(
    database: Database,
    name: str = "Alice",
    role: str = "subscriber",
    is_banned: bool = False,
    banned_until: datetime | None = None,
    avatar_url: str | None = None,
) -> User:
    """Insert a user directly; the identity service owns this table in production."""
    async with database.session_factory() as session:
        user = User(
            email=f"user{next(_emails)}@example.com",
            name=name,
            role=role,
            is_banned=is_banned,
            banned_until=banned_until,
            avatar_url=avatar_url,
            created_at=utcnow(),
        )
        session.add(user)
        await session.commit()
        return user


def auth_headers(settings: Settings, user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.role, settings)
    return {"Authorization": f"Bearer {token}"}


async def set_post_flags(database: Database, post_id: int, **flags: object) -> None:
    """Flip post columns (is_locked, is_pinned, views_count, ...) directly."""
    async with database.session_factory() as session:
        post = await session.get(Post, post_id)
        assert post is not None
        for key, value in flags.items():
            setattr(post, key, value)
        await session.commit()


async def fetch_post(database: Database, post_id: int) -> Post:
    async with database.session_factory() as session:
        post = await session.get(Post, post_id)
        assert post is not None
        return post


async def fetch_reply(database: Database, reply_id: int) -> Reply | None:
    async with database.session_factory() as session:
        return await session.get(Reply, reply_id)


async def create_post_via_api(
    client: AsyncClient,
    headers: dict[str, str],
    title: str = "Hello community",
    content: str = "First post body",
    category: str = "general",
    tags: list[str] | None = None,
) -> dict:
    response = await client.post(
        "/api/community/posts",
        json={"title": title, "content": content, "category": category, "tags": tags or []},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_reply_via_api(
    client: AsyncClient,
    headers: dict[str, str],
    post_id: int,
    content: str = "A reply",
    parent_reply_id: int | None = None,
) -> dict:
    body: dict[str, object] = {"postId": post_id, "content": content}
    if parent_reply_id is not None:
        body["parentReplyId"] = parent_reply_id
    response = await client.post("/api/community/replies", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]
