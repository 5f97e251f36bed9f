"""Moderation console: state-changing actions, reports, audit log, stats."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.community import gate
from inkwell.community.post_service import log_moderation_action
from inkwell.db.base import utcnow
from inkwell.db.models import ModerationAction, ModerationReport, Post, Reply, User
from inkwell.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# action -> (flag attribute, new value); "delete" sets is_deleted
POST_FLAG_ACTIONS: dict[str, tuple[str, bool]] = {
    "pin": ("is_pinned", True),
    "unpin": ("is_pinned", False),
    "lock": ("is_locked", True),
    "unlock": ("is_locked", False),
    "feature": ("is_featured", True),
    "unfeature": ("is_featured", False),
    "delete": ("is_deleted", True),
}

REPORT_TARGET_TYPES = ("post", "reply", "user")
REPORT_PRIORITIES = ("low", "medium", "high", "urgent")
REPORT_STATUSES = ("pending", "reviewing", "resolved", "dismissed")
OPEN_STATUSES = ("pending", "reviewing")
CLOSED_STATUSES = ("resolved", "dismissed")

_PRIORITY_RANK = case(
    {"urgent": 0, "high": 1, "medium": 2, "low": 3},
    value=ModerationReport.priority,
    else_=4,
)


def ensure_moderator(user: User) -> None:
    if not gate.is_staff(user):
        raise ForbiddenError("Moderator access required")


async def apply_action(
    db: AsyncSession,
    moderator: User,
    action_type: str,
    target_type: str,
    target_id: int,
    reason: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> ModerationAction:
    """
    Apply a moderation action and record it in the audit log.

    Posts accept every action; replies accept only ``delete``.

    Raises:
        ForbiddenError: Caller is not staff.
        ValidationError: Unknown action or unsupported target type.
        NotFoundError: Target missing or already deleted.
    """
    ensure_moderator(moderator)
    if action_type not in POST_FLAG_ACTIONS:
        raise ValidationError(f"Unknown moderation action: {action_type}")
    if target_type == "post":
        model: type[Post] | type[Reply] = Post
    elif target_type == "reply" and action_type == "delete":
        model = Reply
    else:
        raise ValidationError(f"Action '{action_type}' is not supported for target type '{target_type}'")

    result = await db.execute(select(model).where(model.id == target_id, model.is_deleted.is_(False)))
    target = result.unique().scalar_one_or_none()
    if target is None:
        raise NotFoundError(f"{target_type} not found")

    flag, value = POST_FLAG_ACTIONS[action_type]
    setattr(target, flag, value)
    target.updated_at = utcnow()

    logged_action = f"delete_{target_type}" if action_type == "delete" else action_type
    action = await log_moderation_action(
        db, moderator.id, logged_action, target_type, target_id, reason=reason, metadata=metadata
    )
    action.moderator = moderator
    logger.info("Moderator %s applied %s to %s %s", moderator.id, logged_action, target_type, target_id)
    return action


async def list_actions(db: AsyncSession, page: int = 1, limit: int = 20) -> tuple[list[ModerationAction], int]:
    """Audit log, newest first."""
    total_result = await db.execute(select(func.count()).select_from(ModerationAction))
    total = total_result.scalar_one()
    offset = (page - 1) * limit
    if offset >= total:
        return [], total
    result = await db.execute(
        select(ModerationAction)
        .order_by(ModerationAction.created_at.desc(), ModerationAction.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.unique().scalars().all()), total


async def _report_target_exists(db: AsyncSession, target_type: str, target_id: int) -> bool:
    model: type[Post] | type[Reply] | type[User]
    if target_type == "post":
        model = Post
    elif target_type == "reply":
        model = Reply
    else:
        model = User
    result = await db.execute(select(model.id).where(model.id == target_id))
    return result.scalar_one_or_none() is not None


async def create_report(
    db: AsyncSession,
    reporter: User,
    target_type: str,
    target_id: int,
    reason: str,
    description: str | None = None,
    priority: str = "medium",
) -> ModerationReport:
    """File a report. One open report per reporter and target."""
    if target_type not in REPORT_TARGET_TYPES:
        raise ValidationError(f"Target type must be one of: {', '.join(REPORT_TARGET_TYPES)}")
    if priority not in REPORT_PRIORITIES:
        raise ValidationError(f"Priority must be one of: {', '.join(REPORT_PRIORITIES)}")
    if not reason.strip():
        raise ValidationError("Reason is required")
    if not await _report_target_exists(db, target_type, target_id):
        raise NotFoundError(f"{target_type} not found")

    existing = await db.execute(
        select(ModerationReport.id).where(
            ModerationReport.reporter_id == reporter.id,
            ModerationReport.target_type == target_type,
            ModerationReport.target_id == target_id,
            ModerationReport.status.in_(OPEN_STATUSES),
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("You have already reported this content")

    report = ModerationReport(
        reporter_id=reporter.id,
        target_type=target_type,
        target_id=target_id,
        reason=reason.strip(),
        description=description,
        priority=priority,
        status="pending",
        moderator_id=None,
        moderator_notes=None,
        created_at=utcnow(),
        resolved_at=None,
    )
    report.reporter = reporter
    report.moderator = None
    db.add(report)
    await db.flush()
    logger.info("User %s reported %s %s (%s)", reporter.id, target_type, target_id, priority)
    return report


async def list_reports(
    db: AsyncSession,
    status: str | None = None,
    priority: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[ModerationReport], int]:
    """Reports ordered by urgency, then newest first."""
    if status is not None and status not in REPORT_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(REPORT_STATUSES)}")
    if priority is not None and priority not in REPORT_PRIORITIES:
        raise ValidationError(f"Priority must be one of: {', '.join(REPORT_PRIORITIES)}")

    filters = []
    if status is not None:
        filters.append(ModerationReport.status == status)
    if priority is not None:
        filters.append(ModerationReport.priority == priority)

    total_result = await db.execute(select(func.count()).select_from(ModerationReport).where(*filters))
    total = total_result.scalar_one()
    offset = (page - 1) * limit
    if offset >= total:
        return [], total
    result = await db.execute(
        select(ModerationReport)
        .where(*filters)
        .order_by(_PRIORITY_RANK, ModerationReport.created_at.desc(), ModerationReport.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.unique().scalars().all()), total


async def update_report(
    db: AsyncSession,
    moderator: User,
    report_id: int,
    status: str,
    moderator_notes: str | None = None,
) -> ModerationReport:
    """Move a report through review. Closing it stamps ``resolved_at``."""
    if status not in REPORT_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(REPORT_STATUSES)}")

    result = await db.execute(select(ModerationReport).where(ModerationReport.id == report_id))
    report = result.unique().scalar_one_or_none()
    if report is None:
        raise NotFoundError("Report not found")

    report.status = status
    report.moderator_id = moderator.id
    report.moderator = moderator
    if moderator_notes is not None:
        report.moderator_notes = moderator_notes
    report.resolved_at = utcnow() if status in CLOSED_STATUSES else None
    await db.flush()
    return report


async def get_stats(db: AsyncSession) -> dict[str, int]:
    """Counts for the moderation dashboard."""

    async def count(stmt: Any) -> int:  # noqa: ANN401
        result = await db.execute(stmt)
        return result.scalar_one()

    return {
        "pending_reports": await count(
            select(func.count()).select_from(ModerationReport).where(ModerationReport.status == "pending")
        ),
        "reviewing_reports": await count(
            select(func.count()).select_from(ModerationReport).where(ModerationReport.status == "reviewing")
        ),
        "urgent_reports": await count(
            select(func.count())
            .select_from(ModerationReport)
            .where(ModerationReport.priority == "urgent", ModerationReport.status.in_(OPEN_STATUSES))
        ),
        "banned_users": await count(
            select(func.count()).select_from(User).where(User.is_banned.is_(True))
        ),
        "deleted_posts": await count(select(func.count()).select_from(Post).where(Post.is_deleted.is_(True))),
        "deleted_replies": await count(select(func.count()).select_from(Reply).where(Reply.is_deleted.is_(True))),
    }
