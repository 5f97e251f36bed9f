"""Denormalized counter maintenance.

Like/dislike/view counts on posts and replies are a cache of the interaction
ledger. :func:`refresh_counters` re-derives them from the ledger on every
change, so concurrent writers converge on the right numbers without locks.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.db.base import utcnow
from inkwell.db.models import Interaction, Post, Reply


@dataclass(frozen=True)
class Counts:
    likes: int
    dislikes: int
    views: int | None = None  # replies carry no view counter


async def count_ledger(db: AsyncSession, target_type: str, target_id: int) -> dict[str, int]:
    """Count ledger rows per interaction type for one target."""
    result = await db.execute(
        select(Interaction.interaction_type, func.count())
        .where(
            Interaction.target_type == target_type,
            Interaction.target_id == target_id,
        )
        .group_by(Interaction.interaction_type)
    )
    return {kind: count for kind, count in result.all()}


async def refresh_counters(db: AsyncSession, target_type: str, target_id: int) -> Counts:
    """Recompute cached counters for a post or reply and write them back."""
    tally = await count_ledger(db, target_type, target_id)
    likes = tally.get("like", 0)
    dislikes = tally.get("dislike", 0)

    if target_type == "post":
        views = tally.get("view", 0)
        await db.execute(
            update(Post)
            .where(Post.id == target_id)
            .values(likes_count=likes, dislikes_count=dislikes, views_count=views)
        )
        return Counts(likes=likes, dislikes=dislikes, views=views)

    await db.execute(
        update(Reply).where(Reply.id == target_id).values(likes_count=likes, dislikes_count=dislikes)
    )
    return Counts(likes=likes, dislikes=dislikes)


async def increment_replies_count(db: AsyncSession, post_id: int) -> None:
    """Count a new reply against its post and bump the post's activity time.

    Replies are counted once at creation and never uncounted, so soft-deleted
    replies stay in the total.
    """
    await db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(replies_count=Post.replies_count + 1, last_activity_at=utcnow())
    )
