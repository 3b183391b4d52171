from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from seatbook.db.base import Base
from seatbook.db.types import UTCDateTime


class AuditLog(Base):
    """Operator write against a venue: hours, blocks, status."""

    __tablename__ = "audit_logs"
    __table_args__ = (Index("ix_audit_logs_venue_created", "venue_id", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    venue_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("venues.id"), nullable=True)
    # Forwarded by the gateway in X-Actor-Id; not a local user row
    actor_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    action_type: Mapped[str] = mapped_column(String(64), nullable=False)
    target_type: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    target_id: Mapped[str] = mapped_column(String(36), nullable=False, default="")

    summary: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    diff_json: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    ip_address: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=lambda: datetime.now(timezone.utc), nullable=False)
