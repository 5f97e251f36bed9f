"""Category catalog: seed data, listing, and display lookups."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.community.schemas import CategoryInfo
from inkwell.db.dialect import upsert_insert
from inkwell.db.models import Category, Post

logger = logging.getLogger(__name__)

FALLBACK_COLOR = "#6B7280"
FALLBACK_ICON = "folder"

DEFAULT_CATEGORIES: list[dict] = [
    {
        "name": "general",
        "description": "General community discussion",
        "color": "#3B82F6",
        "icon": "📝",
        "display_order": 0,
    },
    {
        "name": "Tips & Strategies",
        "description": "Share tips and strategies for newsletter growth",
        "color": "#3B82F6",
        "icon": "💡",
        "display_order": 1,
    },
    {
        "name": "Showcase",
        "description": "Show off your newsletter designs and content",
        "color": "#10B981",
        "icon": "🎨",
        "display_order": 2,
    },
    {
        "name": "Tools & Tech",
        "description": "Discuss tools and technology for newsletters",
        "color": "#8B5CF6",
        "icon": "🔧",
        "display_order": 3,
    },
    {
        "name": "Announcements",
        "description": "Official announcements and updates",
        "color": "#F59E0B",
        "icon": "📢",
        "display_order": 4,
    },
    {
        "name": "Q&A",
        "description": "Questions and answers about newsletters",
        "color": "#EF4444",
        "icon": "❓",
        "display_order": 5,
    },
    {
        "name": "Off-Topic",
        "description": "General discussions and off-topic conversations",
        "color": "#6B7280",
        "icon": "💬",
        "display_order": 6,
    },
]


async def ensure_defaults(db: AsyncSession) -> int:
    """Upsert the default categories keyed by name. Safe to run repeatedly."""
    seeded = 0
    for category_data in DEFAULT_CATEGORIES:
        stmt = upsert_insert(db, Category).values(**category_data, is_active=True)
        stmt = stmt.on_conflict_do_update(
            index_elements=["name"],
            set_={
                "description": stmt.excluded.description,
                "color": stmt.excluded.color,
                "icon": stmt.excluded.icon,
                "display_order": stmt.excluded.display_order,
                "is_active": stmt.excluded.is_active,
            },
        )
        await db.execute(stmt)
        seeded += 1

    await db.flush()
    logger.info("Seeded %d community categories", seeded)
    return seeded


@dataclass(frozen=True)
class CategoryStats:
    category: Category
    post_count: int
    last_activity: datetime | None


async def list_categories(db: AsyncSession, include_stats: bool = False) -> list[CategoryStats]:
    """
    Active categories ordered by display order, then name.

    With ``include_stats`` each entry carries the number of live posts and the
    most recent post activity, computed on read.
    """
    if not include_stats:
        result = await db.execute(
            select(Category)
            .where(Category.is_active.is_(True))
            .order_by(Category.display_order, Category.name)
        )
        return [CategoryStats(c, 0, None) for c in result.scalars().all()]

    result = await db.execute(
        select(Category, func.count(Post.id), func.max(Post.last_activity_at))
        .outerjoin(Post, and_(Post.category == Category.name, Post.is_deleted.is_(False)))
        .where(Category.is_active.is_(True))
        .group_by(Category.id)
        .order_by(Category.display_order, Category.name)
    )
    return [CategoryStats(c, count, last) for c, count, last in result.all()]


class CategoryCatalog:
    """Name -> display metadata lookup with a fixed fallback.

    Posts reference categories by name only, so a renamed or removed category
    still renders, just with the fallback color and icon.
    """

    def __init__(self, categories: Iterable[Category] = ()) -> None:
        self._by_name = {c.name: CategoryInfo(name=c.name, color=c.color, icon=c.icon) for c in categories}

    @classmethod
    async def load(cls, db: AsyncSession, names: Iterable[str] | None = None) -> CategoryCatalog:
        """Load catalog rows, optionally only those named."""
        stmt = select(Category)
        if names is not None:
            wanted = set(names)
            if not wanted:
                return cls()
            stmt = stmt.where(Category.name.in_(wanted))
        result = await db.execute(stmt)
        return cls(result.scalars().all())

    def display(self, name: str) -> CategoryInfo:
        info = self._by_name.get(name)
        if info is None:
            return CategoryInfo(name=name, color=FALLBACK_COLOR, icon=FALLBACK_ICON)
        return info

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
