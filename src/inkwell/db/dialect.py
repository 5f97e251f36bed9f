"""Dialect-aware INSERT ... ON CONFLICT construction.

Production runs on PostgreSQL; the test suite runs on SQLite. Both dialects
implement ``on_conflict_do_nothing`` / ``on_conflict_do_update`` with the same
signature, so callers only need the right ``insert`` for the bound engine.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession


def upsert_insert(db: AsyncSession, model: Any) -> Any:  # noqa: ANN401
    """Return a conflict-capable insert for ``model`` on the session's dialect."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert(model)
    return pg_insert(model)
