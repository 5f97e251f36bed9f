"""Interaction ledger: likes, dislikes, bookmarks and views.

One row per (user, target, kind). Writes are idempotent: a duplicate insert
is absorbed by ``ON CONFLICT DO NOTHING`` and a delete of a missing row is a
no-op. Every add/remove refreshes the target's cached counters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.community.counters import Counts, refresh_counters
from inkwell.db.dialect import upsert_insert
from inkwell.db.models import Interaction, Post, Reply
from inkwell.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

TARGET_TYPES = ("post", "reply")
USER_INTERACTION_TYPES = ("like", "dislike", "bookmark")
OPPOSITE = {"like": "dislike", "dislike": "like"}

_UNIQUE_COLUMNS = ["user_id", "target_type", "target_id", "interaction_type"]


@dataclass(frozen=True)
class AddResult:
    is_new: bool
    counts: Counts


@dataclass(frozen=True)
class RemoveResult:
    was_removed: bool
    counts: Counts


def validate_target_type(target_type: str) -> None:
    if target_type not in TARGET_TYPES:
        raise ValidationError('Target type must be "post" or "reply"')


def validate_interaction_type(interaction_type: str) -> None:
    if interaction_type not in USER_INTERACTION_TYPES:
        raise ValidationError('Interaction type must be "like", "dislike", or "bookmark"')


async def target_exists(db: AsyncSession, target_type: str, target_id: int) -> bool:
    """True when the post/reply exists and is not soft-deleted."""
    model = Post if target_type == "post" else Reply
    result = await db.execute(
        select(model.id).where(model.id == target_id, model.is_deleted.is_(False))
    )
    return result.scalar_one_or_none() is not None


async def _insert_if_absent(
    db: AsyncSession, user_id: int, target_type: str, target_id: int, interaction_type: str
) -> bool:
    """Insert one ledger row; returns False when it already existed."""
    stmt = (
        upsert_insert(db, Interaction)
        .values(
            user_id=user_id,
            target_type=target_type,
            target_id=target_id,
            interaction_type=interaction_type,
        )
        .on_conflict_do_nothing(index_elements=_UNIQUE_COLUMNS)
        .returning(Interaction.id)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none() is not None


async def add_interaction(
    db: AsyncSession,
    user_id: int,
    target_type: str,
    target_id: int,
    interaction_type: str,
) -> AddResult:
    """
    Record a like, dislike or bookmark.

    Like and dislike are mutually exclusive: the opposite kind is deleted
    before the insert. A repeated call is a no-op reported as ``is_new=False``.

    Raises:
        ValidationError: Unknown target or interaction type.
        NotFoundError: Target missing or soft-deleted.
    """
    validate_target_type(target_type)
    validate_interaction_type(interaction_type)
    if not await target_exists(db, target_type, target_id):
        raise NotFoundError(f"{target_type} not found")

    opposite = OPPOSITE.get(interaction_type)
    if opposite is not None:
        await db.execute(
            delete(Interaction).where(
                Interaction.user_id == user_id,
                Interaction.target_type == target_type,
                Interaction.target_id == target_id,
                Interaction.interaction_type == opposite,
            )
        )

    is_new = await _insert_if_absent(db, user_id, target_type, target_id, interaction_type)
    counts = await refresh_counters(db, target_type, target_id)
    return AddResult(is_new=is_new, counts=counts)


async def remove_interaction(
    db: AsyncSession,
    user_id: int,
    target_type: str,
    target_id: int,
    interaction_type: str,
) -> RemoveResult:
    """Delete one ledger row if present. Removing nothing is not an error."""
    validate_target_type(target_type)
    validate_interaction_type(interaction_type)

    result = await db.execute(
        delete(Interaction).where(
            Interaction.user_id == user_id,
            Interaction.target_type == target_type,
            Interaction.target_id == target_id,
            Interaction.interaction_type == interaction_type,
        )
    )
    counts = await refresh_counters(db, target_type, target_id)
    return RemoveResult(was_removed=result.rowcount > 0, counts=counts)


async def list_user_interactions(
    db: AsyncSession,
    user_id: int,
    target_type: str,
    target_ids: list[int],
) -> dict[int, list[str]]:
    """Map each target id to the interaction kinds the user holds on it."""
    validate_target_type(target_type)
    if not target_ids:
        return {}

    result = await db.execute(
        select(Interaction.target_id, Interaction.interaction_type)
        .where(
            Interaction.user_id == user_id,
            Interaction.target_type == target_type,
            Interaction.target_id.in_(target_ids),
        )
        .order_by(Interaction.target_id, Interaction.id)
    )
    grouped: dict[int, list[str]] = {}
    for target_id, kind in result.all():
        grouped.setdefault(target_id, []).append(kind)
    return grouped


async def record_view(db: AsyncSession, user_id: int | None, post_id: int) -> bool:
    """
    Best-effort view tracking for a post.

    Runs in its own unit of work and commits it. Any failure is rolled back
    and logged; the caller never sees it. Returns True when a new view row
    was written.
    """
    if user_id is None:
        return False
    try:
        is_new = await _insert_if_absent(db, user_id, "post", post_id, "view")
        if is_new:
            await refresh_counters(db, "post", post_id)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.warning("View tracking failed for post %s", post_id, exc_info=True)
        return False
    return is_new
