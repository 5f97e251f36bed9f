"""Unit tests for the post/reply moderation gate."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from inkwell.community import gate
from inkwell.errors import ForbiddenError, NotFoundError, ValidationError

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _user(id=1, role="subscriber", is_banned=False, banned_until=None):
    return SimpleNamespace(id=id, role=role, is_banned=is_banned, banned_until=banned_until)


def _post(id=10, author_id=1, is_locked=False):
    return SimpleNamespace(id=id, author_id=author_id, is_locked=is_locked)


def _reply(id=100, post_id=10, author_id=1, depth=0, is_deleted=False):
    return SimpleNamespace(id=id, post_id=post_id, author_id=author_id, depth=depth, is_deleted=is_deleted)


class TestBan:
    def test_not_banned(self):
        """Unflagged users are not banned."""
        assert gate.is_banned(_user(), NOW) is False

    def test_open_ended_ban(self):
        """A ban without an end date is active."""
        assert gate.is_banned(_user(is_banned=True), NOW) is True

    def test_future_ban_active(self):
        """A ban ending later is active."""
        assert gate.is_banned(_user(is_banned=True, banned_until=NOW + timedelta(days=1)), NOW) is True

    def test_expired_ban_inactive(self):
        """An expired ban is inactive."""
        assert gate.is_banned(_user(is_banned=True, banned_until=NOW - timedelta(seconds=1)), NOW) is False

    def test_naive_until_treated_as_utc(self):
        """Naive ban ends are read as UTC."""
        until = (NOW + timedelta(hours=1)).replace(tzinfo=None)
        assert gate.is_banned(_user(is_banned=True, banned_until=until), NOW) is True

    def test_banned_user_cannot_create(self):
        """Banned users cannot create content."""
        with pytest.raises(ForbiddenError, match="banned"):
            gate.ensure_can_create(_user(is_banned=True), NOW)


class TestEditRules:
    def test_author_can_edit(self):
        """Authors may edit their own posts."""
        gate.ensure_can_edit_post(_user(id=1), _post(author_id=1))

    def test_stranger_cannot_edit(self):
        """Strangers may not edit."""
        with pytest.raises(ForbiddenError):
            gate.ensure_can_edit_post(_user(id=2), _post(author_id=1))

    @pytest.mark.parametrize("role", ["admin", "moderator"])
    def test_staff_can_edit_others(self, role):
        """Staff may edit anyone's posts."""
        gate.ensure_can_edit_post(_user(id=2, role=role), _post(author_id=1))

    def test_author_blocked_on_locked_post(self):
        """Locks stop author edits."""
        with pytest.raises(ForbiddenError, match="locked"):
            gate.ensure_can_edit_post(_user(id=1), _post(author_id=1, is_locked=True))

    def test_moderator_edits_locked_post(self):
        """Moderators edit through locks."""
        gate.ensure_can_edit_post(_user(id=2, role="moderator"), _post(author_id=1, is_locked=True))

    def test_ownership_checked_before_lock(self):
        """Ownership failure wins over lock failure."""
        with pytest.raises(ForbiddenError, match="your own"):
            gate.ensure_can_edit_post(_user(id=2), _post(author_id=1, is_locked=True))

    def test_reply_edit_on_locked_post(self):
        """Reply edits respect the post lock."""
        with pytest.raises(ForbiddenError, match="locked"):
            gate.ensure_can_edit_reply(_user(id=1), _reply(author_id=1), _post(is_locked=True))

    def test_premium_is_not_staff(self):
        """Premium is not a staff role."""
        with pytest.raises(ForbiddenError):
            gate.ensure_can_modify(_user(id=2, role="premium"), 1, "posts", "delete")


class TestReplyRules:
    def test_locked_post_refuses_subscriber_reply(self):
        """Locked posts refuse subscriber replies."""
        with pytest.raises(ForbiddenError, match="no longer accepting"):
            gate.ensure_can_reply(_user(), _post(is_locked=True), NOW)

    def test_locked_post_accepts_admin_reply(self):
        """Admins reply through locks."""
        gate.ensure_can_reply(_user(role="admin"), _post(is_locked=True), NOW)

    def test_ban_checked_first(self):
        """The ban check runs before the lock check."""
        with pytest.raises(ForbiddenError, match="banned"):
            gate.ensure_can_reply(_user(role="admin", is_banned=True), _post(is_locked=True), NOW)

    def test_top_level_depth_is_zero(self):
        """Replies without a parent sit at depth 0."""
        assert gate.reply_depth(_post(), None) == 0

    def test_depth_is_parent_plus_one(self):
        """Depth is parent depth plus one."""
        assert gate.reply_depth(_post(), _reply(depth=2)) == 3

    def test_depth_beyond_cap_rejected(self):
        """Depth past the cap is rejected."""
        with pytest.raises(ValidationError, match="Maximum reply depth"):
            gate.reply_depth(_post(), _reply(depth=3))

    def test_parent_on_other_post(self):
        """A parent on another post is not found."""
        with pytest.raises(NotFoundError, match="Parent reply"):
            gate.reply_depth(_post(id=10), _reply(post_id=11))

    def test_deleted_parent(self):
        """A deleted parent is not found."""
        with pytest.raises(NotFoundError):
            gate.reply_depth(_post(), _reply(is_deleted=True))


class TestModerationLog:
    def test_self_delete_not_logged(self):
        """Self deletes skip the audit log."""
        assert gate.needs_moderation_log(_user(id=1), 1) is False

    def test_delete_of_others_logged(self):
        """Deleting others' content is audited."""
        assert gate.needs_moderation_log(_user(id=2, role="moderator"), 1) is True
