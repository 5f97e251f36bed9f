"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.jwt import verify_token
from inkwell.auth.service import get_user_by_id
from inkwell.config import Settings
from inkwell.db.models import User
from inkwell.dependencies import get_app_settings, get_db
from inkwell.errors import AuthError

_bearer = HTTPBearer(auto_error=False)


async def _resolve_user(
    credentials: HTTPAuthorizationCredentials | None,
    db: AsyncSession,
    settings: Settings,
) -> User:
    if credentials is None:
        raise AuthError("Authorization header required")

    try:
        payload = verify_token(credentials.credentials, settings)
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise AuthError(f"Invalid token: {e}") from e

    user = await get_user_by_id(db, user_id)
    if user is None:
        raise AuthError("User not found")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> User:
    """
    Verify the bearer token and return the User.

    Banned users are returned as well; the moderation gate decides what they
    may still do (reading is always allowed).
    """
    return await _resolve_user(credentials, db, settings)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> User | None:
    """Like get_current_user, but anonymous or unrecognized callers yield None."""
    if credentials is None:
        return None
    try:
        return await _resolve_user(credentials, db, settings)
    except AuthError:
        return None
