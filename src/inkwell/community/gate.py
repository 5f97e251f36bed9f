"""Authorization and state rules for posts and replies.

Each ``ensure_*`` function raises on the first rule that fails and returns
``None`` otherwise. They are pure: callers load the rows and pass them in.
"""

from __future__ import annotations

from datetime import datetime, timezone

from inkwell.db.models import Post, Reply, User
from inkwell.errors import ForbiddenError, NotFoundError, ValidationError

STAFF_ROLES = frozenset({"admin", "moderator"})
MAX_REPLY_DEPTH = 3


def is_staff(user: User) -> bool:
    return user.role in STAFF_ROLES


def is_banned(user: User, now: datetime | None = None) -> bool:
    """A ban is active when flagged and either open-ended or not yet expired."""
    if not user.is_banned:
        return False
    if user.banned_until is None:
        return True
    now = now or datetime.now(timezone.utc)
    until = user.banned_until
    if until.tzinfo is None:
        until = until.replace(tzinfo=timezone.utc)
    return until > now


def ensure_can_create(user: User, now: datetime | None = None) -> None:
    if is_banned(user, now):
        raise ForbiddenError("You are currently banned from posting")


def ensure_can_modify(user: User, author_id: int, nouns: str, verb: str) -> None:
    """Only the author or staff may edit or delete content."""
    if user.id != author_id and not is_staff(user):
        raise ForbiddenError(f"You can only {verb} your own {nouns}")


def ensure_can_edit_post(user: User, post: Post) -> None:
    ensure_can_modify(user, post.author_id, "posts", "edit")
    if post.is_locked and not is_staff(user):
        raise ForbiddenError("This post is locked and cannot be edited")


def ensure_can_edit_reply(user: User, reply: Reply, post: Post) -> None:
    ensure_can_modify(user, reply.author_id, "replies", "edit")
    if post.is_locked and not is_staff(user):
        raise ForbiddenError("This post is locked and replies cannot be edited")


def ensure_can_reply(user: User, post: Post, now: datetime | None = None) -> None:
    ensure_can_create(user, now)
    if post.is_locked and not is_staff(user):
        raise ForbiddenError("This post is locked and no longer accepting replies")


def reply_depth(post: Post, parent: Reply | None, max_depth: int = MAX_REPLY_DEPTH) -> int:
    """
    Compute the depth of a new reply.

    Raises:
        NotFoundError: Parent missing, deleted, or on another post.
        ValidationError: The new reply would sit deeper than ``max_depth``.
    """
    if parent is None:
        return 0
    if parent.post_id != post.id or parent.is_deleted:
        raise NotFoundError("Parent reply not found")
    depth = parent.depth + 1
    if depth > max_depth:
        raise ValidationError("Maximum reply depth exceeded")
    return depth


def needs_moderation_log(user: User, author_id: int) -> bool:
    """Deletes of someone else's content go to the moderation log."""
    return user.id != author_id
