"""Error taxonomy shared by the community services and the HTTP layer."""

from __future__ import annotations


class CommunityError(Exception):
    """Base error. Carries the HTTP status the handler maps it to."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CommunityError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Invalid request"


class AuthError(CommunityError):
    """Missing or unrecognized credential."""

    status_code = 401
    default_message = "Authorization header required"


class ForbiddenError(CommunityError):
    """Authenticated but not permitted."""

    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFoundError(CommunityError):
    """Target absent or soft-deleted."""

    status_code = 404
    default_message = "Not found"


class ConflictError(CommunityError):
    """Duplicate of an open record (e.g. a second pending report)."""

    status_code = 409
    default_message = "Conflict"


class InternalError(CommunityError):
    """Store or unexpected failure."""
