from __future__ import annotations

from datetime import datetime, timezone

from fastapi import Header

from seatbook.db.session import SessionLocal


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_now() -> datetime:
    """Current instant; overridden in tests to pin the clock."""
    return datetime.now(tz=timezone.utc)


def get_actor_id(x_actor_id: str | None = Header(default=None)) -> str | None:
    # Identity is resolved by the fronting gateway; we only record it.
    return x_actor_id
