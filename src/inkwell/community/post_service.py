"""Post service: create, fetch, edit and soft-delete forum posts."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.community import gate
from inkwell.db.base import utcnow
from inkwell.db.models import ModerationAction, Post, PostTag, User
from inkwell.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255
MAX_TAGS = 10
MAX_TAG_LENGTH = 64


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Trim, drop blanks and duplicates, keep first-seen order."""
    seen: list[str] = []
    for raw in tags or []:
        tag = raw.strip()
        if not tag or tag in seen:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValidationError(f"Tags must be {MAX_TAG_LENGTH} characters or less")
        seen.append(tag)
    if len(seen) > MAX_TAGS:
        raise ValidationError(f"A post can have at most {MAX_TAGS} tags")
    return seen


def _clean_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise ValidationError("Title cannot be empty")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be {MAX_TITLE_LENGTH} characters or less")
    return title


async def get_post(db: AsyncSession, post_id: int) -> Post:
    """Load a live post or raise NotFoundError."""
    result = await db.execute(select(Post).where(Post.id == post_id, Post.is_deleted.is_(False)))
    post = result.unique().scalar_one_or_none()
    if post is None:
        raise NotFoundError("Post not found")
    return post


async def create_post(
    db: AsyncSession,
    user: User,
    title: str,
    content: str,
    category: str = "general",
    tags: list[str] | None = None,
) -> Post:
    """Create a post. Banned users are refused before anything is written."""
    if not title.strip() or not content.strip():
        raise ValidationError("Title and content are required")
    gate.ensure_can_create(user)

    now = utcnow()
    post = Post(
        title=_clean_title(title),
        content=content.strip(),
        author_id=user.id,
        category=(category or "general").strip() or "general",
        last_activity_at=now,
        created_at=now,
        updated_at=now,
        tag_rows=[PostTag(tag=t) for t in normalize_tags(tags)],
    )
    post.author = user
    db.add(post)
    await db.flush()
    logger.info("User %s created post %s", user.id, post.id)
    return post


async def update_post(
    db: AsyncSession,
    user: User,
    post_id: int,
    title: str | None = None,
    content: str | None = None,
    tags: list[str] | None = None,
) -> Post:
    """Edit any subset of title, content and tags."""
    if title is None and content is None and tags is None:
        raise ValidationError("Nothing to update")

    post = await get_post(db, post_id)
    gate.ensure_can_edit_post(user, post)

    if title is not None:
        post.title = _clean_title(title)
    if content is not None:
        if not content.strip():
            raise ValidationError("Content cannot be empty")
        post.content = content.strip()
    if tags is not None:
        wanted = normalize_tags(tags)
        for row in list(post.tag_rows):
            if row.tag not in wanted:
                post.tag_rows.remove(row)
        existing = set(post.tags)
        post.tag_rows.extend(PostTag(tag=t) for t in wanted if t not in existing)

    now = utcnow()
    post.updated_at = now
    post.last_activity_at = now
    await db.flush()
    return post


async def delete_post(db: AsyncSession, user: User, post_id: int) -> Post:
    """Soft-delete a post. Only the author or staff may do it."""
    post = await get_post(db, post_id)
    gate.ensure_can_modify(user, post.author_id, "posts", "delete")
    post.is_deleted = True
    post.updated_at = utcnow()
    await db.flush()
    logger.info("User %s deleted post %s", user.id, post.id)
    return post


async def log_moderation_action(
    db: AsyncSession,
    moderator_id: int,
    action_type: str,
    target_type: str,
    target_id: int,
    reason: str | None = None,
    metadata: dict | None = None,
) -> ModerationAction:
    """Append one row to the moderation audit log."""
    action = ModerationAction(
        moderator_id=moderator_id,
        action_type=action_type,
        target_type=target_type,
        target_id=target_id,
        reason=reason,
        metadata_=metadata or {},
        created_at=utcnow(),
    )
    db.add(action)
    await db.flush()
    return action


async def log_moderator_delete(
    db: AsyncSession, moderator_id: int, target_type: str, target_id: int
) -> bool:
    """
    Best-effort audit entry for a staff delete of someone else's content.

    Called after the delete itself is committed; a failure here is rolled
    back and logged without undoing the delete.
    """
    noun = "Post" if target_type == "post" else "Reply"
    try:
        await log_moderation_action(
            db,
            moderator_id,
            f"delete_{target_type}",
            target_type,
            target_id,
            reason=f"{noun} deleted by moderator",
        )
        await db.commit()
    except Exception:
        await db.rollback()
        logger.error("Failed to log moderation delete of %s %s", target_type, target_id, exc_info=True)
        return False
    return True
