"""Reply service: create, edit and soft-delete replies."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.community import gate
from inkwell.community.counters import increment_replies_count
from inkwell.community.post_service import get_post
from inkwell.db.base import utcnow
from inkwell.db.models import Post, Reply, User
from inkwell.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


async def get_reply(db: AsyncSession, reply_id: int) -> Reply:
    result = await db.execute(select(Reply).where(Reply.id == reply_id, Reply.is_deleted.is_(False)))
    reply = result.unique().scalar_one_or_none()
    if reply is None:
        raise NotFoundError("Reply not found")
    return reply


async def _post_of(db: AsyncSession, reply: Reply) -> Post:
    result = await db.execute(select(Post).where(Post.id == reply.post_id))
    post = result.unique().scalar_one_or_none()
    if post is None:
        raise NotFoundError("Post not found")
    return post


async def create_reply(
    db: AsyncSession,
    user: User,
    post_id: int,
    content: str,
    parent_reply_id: int | None = None,
    max_depth: int = gate.MAX_REPLY_DEPTH,
) -> Reply:
    """
    Create a reply, optionally under another reply.

    Every check runs before the insert, so a rejected reply leaves no row
    behind. On success the post's reply count and activity time are bumped.

    Raises:
        ValidationError: Empty content or the reply would nest too deep.
        ForbiddenError: Banned author, or a locked post and a non-staff author.
        NotFoundError: Post or parent reply missing.
    """
    if not content or not content.strip():
        raise ValidationError("Post ID and content are required")
    gate.ensure_can_create(user)

    post = await get_post(db, post_id)
    gate.ensure_can_reply(user, post)

    parent: Reply | None = None
    if parent_reply_id is not None:
        result = await db.execute(select(Reply).where(Reply.id == parent_reply_id))
        parent = result.unique().scalar_one_or_none()
        if parent is None:
            raise NotFoundError("Parent reply not found")
    depth = gate.reply_depth(post, parent, max_depth)

    now = utcnow()
    reply = Reply(
        content=content.strip(),
        post_id=post.id,
        author_id=user.id,
        parent_reply_id=parent.id if parent is not None else None,
        depth=depth,
        is_edited=False,
        edited_at=None,
        created_at=now,
        updated_at=now,
    )
    reply.author = user
    db.add(reply)
    await db.flush()
    await increment_replies_count(db, post.id)
    logger.info("User %s replied to post %s (reply %s, depth %d)", user.id, post.id, reply.id, depth)
    return reply


async def update_reply(db: AsyncSession, user: User, reply_id: int, content: str) -> Reply:
    """Edit a reply's content. Marks it edited only when the text changes."""
    if not content or not content.strip():
        raise ValidationError("Reply ID and content are required")

    reply = await get_reply(db, reply_id)
    post = await _post_of(db, reply)
    gate.ensure_can_edit_reply(user, reply, post)

    new_content = content.strip()
    if new_content != reply.content:
        now = utcnow()
        reply.content = new_content
        reply.is_edited = True
        reply.edited_at = now
        reply.updated_at = now
        await db.flush()
    return reply


async def delete_reply(db: AsyncSession, user: User, reply_id: int) -> Reply:
    """Soft-delete a reply. The post's reply count is left as is."""
    reply = await get_reply(db, reply_id)
    gate.ensure_can_modify(user, reply.author_id, "replies", "delete")
    reply.is_deleted = True
    reply.updated_at = utcnow()
    await db.flush()
    logger.info("User %s deleted reply %s", user.id, reply.id)
    return reply
