"""Pydantic schemas for community endpoints.

Wire names are camelCase; snake_case is accepted on input too.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[T]):
    """Standard envelope: ``{success, data?, message}``."""

    success: bool = True
    data: T | None = None
    message: str = "OK"


# --- Shared ---


class AuthorInfo(CamelModel):
    id: int
    name: str
    avatar: str
    role: str


class CategoryInfo(CamelModel):
    name: str
    color: str
    icon: str


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


# --- Posts ---


class CreatePostRequest(CamelModel):
    title: str = ""
    content: str = ""
    category: str = "general"
    tags: list[str] = Field(default_factory=list)


class UpdatePostRequest(CamelModel):
    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None


class PostStats(CamelModel):
    views: int
    replies: int
    likes: int
    dislikes: int
    bookmarks: int = 0


class PostResponse(CamelModel):
    id: int
    title: str
    content: str
    author: AuthorInfo
    category: str
    category_info: CategoryInfo
    tags: list[str]
    created_at: datetime
    updated_at: datetime
    last_activity: datetime
    stats: PostStats
    is_pinned: bool
    is_locked: bool
    is_featured: bool


class PostListData(CamelModel):
    posts: list[PostResponse]
    pagination: Pagination


class ReplyNode(CamelModel):
    """One node of the rendered reply forest."""

    id: int
    post_id: int
    parent_reply_id: int | None = None
    depth: int
    content: str
    author: AuthorInfo
    created_at: datetime
    edited_at: datetime | None = None
    likes: int = 0
    dislikes: int = 0
    is_edited: bool = False
    is_deleted: bool = False
    is_liked: bool = False
    is_disliked: bool = False
    replies: list[ReplyNode] = Field(default_factory=list)


class PostDetailData(CamelModel):
    post: PostResponse
    replies: list[ReplyNode]
    viewer_interactions: list[str] = Field(default_factory=list)


# --- Replies ---


class CreateReplyRequest(CamelModel):
    post_id: int
    content: str = ""
    parent_reply_id: int | None = None


class UpdateReplyRequest(CamelModel):
    reply_id: int
    content: str = ""


class DeleteReplyRequest(CamelModel):
    reply_id: int


class ReplyResponse(CamelModel):
    id: int
    post_id: int
    parent_reply_id: int | None = None
    depth: int
    content: str
    author: AuthorInfo
    created_at: datetime
    edited_at: datetime | None = None
    likes: int
    dislikes: int
    is_edited: bool


# --- Interactions ---


class InteractionRequest(CamelModel):
    target_type: str
    target_id: int
    interaction_type: str


class InteractionCounts(CamelModel):
    likes: int
    dislikes: int
    views: int | None = None


class AddInteractionData(CamelModel):
    interaction_type: str
    is_new_interaction: bool
    counts: InteractionCounts


class RemoveInteractionData(CamelModel):
    interaction_type: str
    was_removed: bool
    counts: InteractionCounts


# --- Categories ---


class CategoryResponse(CamelModel):
    id: int
    name: str
    description: str | None = None
    color: str
    icon: str
    display_order: int
    post_count: int | None = None
    last_activity: datetime | None = None


# --- Moderation ---


class ModerationActionRequest(CamelModel):
    action_type: str
    target_type: str
    target_id: int
    reason: str | None = Field(None, max_length=1000)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ModerationActionResponse(CamelModel):
    id: int
    moderator: AuthorInfo
    action_type: str
    target_type: str
    target_id: int
    reason: str | None = None
    metadata: dict[str, Any]
    created_at: datetime


class ModerationActionListData(CamelModel):
    actions: list[ModerationActionResponse]
    pagination: Pagination


class CreateReportRequest(CamelModel):
    target_type: str
    target_id: int
    reason: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=2000)
    priority: str = "medium"


class UpdateReportRequest(CamelModel):
    status: str
    moderator_notes: str | None = Field(None, max_length=2000)


class ReportResponse(CamelModel):
    id: int
    reporter: AuthorInfo
    target_type: str
    target_id: int
    reason: str
    description: str | None = None
    priority: str
    status: str
    moderator: AuthorInfo | None = None
    moderator_notes: str | None = None
    created_at: datetime
    resolved_at: datetime | None = None


class ReportListData(CamelModel):
    reports: list[ReportResponse]
    pagination: Pagination


class ModerationStats(CamelModel):
    pending_reports: int
    reviewing_reports: int
    urgent_reports: int
    banned_users: int
    deleted_posts: int
    deleted_replies: int
