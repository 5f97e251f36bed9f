"""ORM models for the community schema.

``users`` belongs to the identity service; the community code only reads it.
Everything prefixed ``community_`` plus the moderation tables is owned here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.db.base import Base, BigIntPK, utcnow

# ---------------------------------------------------------------------------
# Users (read-only)
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the identity service's 'users' table."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="subscriber")
    is_banned: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    banned_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class Category(Base):
    """Forum category. ``name`` is the key posts reference."""

    __tablename__ = "community_categories"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    color: Mapped[str] = mapped_column(String(16), nullable=False, default="#3B82F6")
    icon: Mapped[str] = mapped_column(String(32), nullable=False, default="folder")
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class Post(Base):
    """Forum thread. Counter columns are a cache of the interaction ledger."""

    __tablename__ = "community_posts"
    __table_args__ = (
        Index("idx_community_posts_listing", "is_deleted", "is_pinned", "last_activity_at"),
        Index("idx_community_posts_category", "category"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="general")

    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    views_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    replies_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_activity_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    author: Mapped[User] = relationship("User", lazy="joined")
    tag_rows: Mapped[list[PostTag]] = relationship(
        "PostTag",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="PostTag.id",
    )

    @property
    def tags(self) -> list[str]:
        return [row.tag for row in self.tag_rows]


class PostTag(Base):
    """One tag on one post."""

    __tablename__ = "community_post_tags"
    __table_args__ = (
        UniqueConstraint("post_id", "tag", name="uq_community_post_tag"),
        Index("idx_community_post_tags_tag", "tag"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("community_posts.id", ondelete="CASCADE"), nullable=False
    )
    tag: Mapped[str] = mapped_column(String(64), nullable=False)


# ---------------------------------------------------------------------------
# Replies
# ---------------------------------------------------------------------------


class Reply(Base):
    """Reply to a post, optionally nested under another reply."""

    __tablename__ = "community_replies"
    __table_args__ = (
        Index("idx_community_replies_tree", "post_id", "depth", "created_at"),
        Index("idx_community_replies_parent", "parent_reply_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    post_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("community_posts.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    parent_reply_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("community_replies.id"), nullable=True
    )
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_edited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    author: Mapped[User] = relationship("User", lazy="joined")


# ---------------------------------------------------------------------------
# Interaction ledger
# ---------------------------------------------------------------------------


class Interaction(Base):
    """One user's like/dislike/bookmark/view on a post or reply."""

    __tablename__ = "community_interactions"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "target_type", "target_id", "interaction_type", name="uq_community_interaction"
        ),
        Index("idx_community_interactions_target", "target_type", "target_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    target_type: Mapped[str] = mapped_column(String(16), nullable=False)
    target_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    interaction_type: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Moderation
# ---------------------------------------------------------------------------


class ModerationAction(Base):
    """Append-only moderation audit log."""

    __tablename__ = "moderation_actions"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    moderator_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    action_type: Mapped[str] = mapped_column(String(32), nullable=False)
    target_type: Mapped[str] = mapped_column(String(16), nullable=False)
    target_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    moderator: Mapped[User] = relationship("User", lazy="joined")


class ModerationReport(Base):
    """User-submitted report awaiting moderator review."""

    __tablename__ = "moderation_reports"
    __table_args__ = (
        Index("idx_moderation_reports_status", "status", "priority"),
        Index("idx_moderation_reports_target", "reporter_id", "target_type", "target_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    reporter_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    target_type: Mapped[str] = mapped_column(String(16), nullable=False)
    target_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reason: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    moderator_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=True)
    moderator_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    reporter: Mapped[User] = relationship("User", lazy="joined", foreign_keys=[reporter_id])
    moderator: Mapped[User | None] = relationship("User", lazy="joined", foreign_keys=[moderator_id])
