"""Post listing: filtering, sort modes and offset pagination."""

from __future__ import annotations

import math
from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.community.schemas import Pagination
from inkwell.db.models import Interaction, Post, PostTag
from inkwell.errors import ValidationError

SORT_MODES = ("recent", "popular", "trending")
ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class PostQuery:
    page: int = 1
    limit: int = 20
    category: str = ALL_CATEGORIES
    sort: str = "recent"
    search: str | None = None
    featured_only: bool = False

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


def make_pagination(page: int, limit: int, total: int) -> Pagination:
    pages = total_pages(total, limit)
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
    )


def sort_order(sort: str) -> list[ColumnElement]:
    """ORDER BY clauses for a sort mode. Pinned posts always lead."""
    if sort == "recent":
        return [Post.is_pinned.desc(), Post.last_activity_at.desc(), Post.id.desc()]
    if sort == "popular":
        return [
            Post.is_pinned.desc(),
            (Post.likes_count + Post.replies_count).desc(),
            Post.created_at.desc(),
            Post.id.desc(),
        ]
    if sort == "trending":
        return [
            Post.is_pinned.desc(),
            Post.views_count.desc(),
            Post.last_activity_at.desc(),
            Post.id.desc(),
        ]
    raise ValidationError(f"Sort must be one of: {', '.join(SORT_MODES)}")


def _filtered(stmt: Select, query: PostQuery) -> Select:
    stmt = stmt.where(Post.is_deleted.is_(False))
    if query.category and query.category != ALL_CATEGORIES:
        stmt = stmt.where(Post.category == query.category)
    if query.featured_only:
        stmt = stmt.where(Post.is_featured.is_(True))
    search = (query.search or "").strip()
    if search:
        tagged = select(PostTag.post_id).where(PostTag.tag == search)
        stmt = stmt.where(
            or_(
                Post.title.icontains(search, autoescape=True),
                Post.content.icontains(search, autoescape=True),
                Post.id.in_(tagged),
            )
        )
    return stmt


async def list_posts(db: AsyncSession, query: PostQuery) -> tuple[list[Post], int]:
    """
    Return one page of posts and the total matching count.

    Pages past the end come back empty with the real total.
    """
    if query.page < 1 or query.limit < 1:
        raise ValidationError("Page and limit must be positive")
    order = sort_order(query.sort)

    total_result = await db.execute(_filtered(select(func.count()).select_from(Post), query))
    total = total_result.scalar_one()
    if query.offset >= total:
        return [], total

    result = await db.execute(
        _filtered(select(Post), query).order_by(*order).offset(query.offset).limit(query.limit)
    )
    posts = list(result.unique().scalars().all())
    return posts, total


async def bookmark_counts(db: AsyncSession, post_ids: list[int]) -> dict[int, int]:
    """Live bookmark counts for a page of posts."""
    if not post_ids:
        return {}
    result = await db.execute(
        select(Interaction.target_id, func.count())
        .where(
            Interaction.target_type == "post",
            Interaction.interaction_type == "bookmark",
            Interaction.target_id.in_(post_ids),
        )
        .group_by(Interaction.target_id)
    )
    return {target_id: count for target_id, count in result.all()}
