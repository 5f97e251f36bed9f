"""Moderation console endpoints. Everything except filing a report is staff only."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.dependencies import get_current_user
from inkwell.community import moderation_service
from inkwell.community.listing import make_pagination
from inkwell.community.presenters import author_info
from inkwell.community.schemas import (
    ApiResponse,
    CreateReportRequest,
    ModerationActionListData,
    ModerationActionRequest,
    ModerationActionResponse,
    ModerationStats,
    ReportListData,
    ReportResponse,
    UpdateReportRequest,
)
from inkwell.db.models import ModerationAction, ModerationReport, User
from inkwell.dependencies import get_db

router = APIRouter(prefix="/api/community/moderation", tags=["Moderation"])


async def require_moderator(user: User = Depends(get_current_user)) -> User:
    """Resolve the caller and insist on an admin or moderator role."""
    moderation_service.ensure_moderator(user)
    return user


def _action_response(action: ModerationAction) -> ModerationActionResponse:
    return ModerationActionResponse(
        id=action.id,
        moderator=author_info(action.moderator),
        action_type=action.action_type,
        target_type=action.target_type,
        target_id=action.target_id,
        reason=action.reason,
        metadata=action.metadata_ or {},
        created_at=action.created_at,
    )


def _report_response(report: ModerationReport) -> ReportResponse:
    return ReportResponse(
        id=report.id,
        reporter=author_info(report.reporter),
        target_type=report.target_type,
        target_id=report.target_id,
        reason=report.reason,
        description=report.description,
        priority=report.priority,
        status=report.status,
        moderator=author_info(report.moderator) if report.moderator is not None else None,
        moderator_notes=report.moderator_notes,
        created_at=report.created_at,
        resolved_at=report.resolved_at,
    )


@router.get("/stats", response_model=ApiResponse[ModerationStats])
async def moderation_stats(
    _moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    """Open report counts and deleted/banned totals."""
    stats = await moderation_service.get_stats(db)
    return ApiResponse(data=ModerationStats(**stats), message="Moderation stats retrieved successfully")


@router.post("/actions", response_model=ApiResponse[ModerationActionResponse], status_code=201)
async def apply_moderation_action(
    body: ModerationActionRequest,
    moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    """Pin, lock, feature (or undo those) or delete content, with an audit entry."""
    action = await moderation_service.apply_action(
        db,
        moderator,
        body.action_type,
        body.target_type,
        body.target_id,
        reason=body.reason,
        metadata=body.metadata,
    )
    await db.commit()
    return ApiResponse(data=_action_response(action), message="Moderation action applied successfully")


@router.get("/actions", response_model=ApiResponse[ModerationActionListData])
async def list_moderation_actions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    """Audit log, newest first."""
    actions, total = await moderation_service.list_actions(db, page, limit)
    return ApiResponse(
        data=ModerationActionListData(
            actions=[_action_response(a) for a in actions],
            pagination=make_pagination(page, limit, total),
        ),
        message="Moderation actions retrieved successfully",
    )


@router.post("/reports", response_model=ApiResponse[ReportResponse], status_code=201)
async def create_report(
    body: CreateReportRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Report a post, reply or user. Any signed-in user may report."""
    report = await moderation_service.create_report(
        db,
        user,
        body.target_type,
        body.target_id,
        body.reason,
        body.description,
        body.priority,
    )
    await db.commit()
    return ApiResponse(data=_report_response(report), message="Report submitted successfully")


@router.get("/reports", response_model=ApiResponse[ReportListData])
async def list_reports(
    status: str | None = Query(None),
    priority: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    """Reports, most urgent first."""
    reports, total = await moderation_service.list_reports(db, status, priority, page, limit)
    return ApiResponse(
        data=ReportListData(
            reports=[_report_response(r) for r in reports],
            pagination=make_pagination(page, limit, total),
        ),
        message="Reports retrieved successfully",
    )


@router.put("/reports/{report_id}", response_model=ApiResponse[ReportResponse])
async def update_report(
    report_id: int,
    body: UpdateReportRequest,
    moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    """Change a report's status and notes."""
    report = await moderation_service.update_report(db, moderator, report_id, body.status, body.moderator_notes)
    await db.commit()
    return ApiResponse(data=_report_response(report), message="Report updated successfully")
