from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from seatbook.db.base import Base
from seatbook.db.types import UTCDateTime
from seatbook.models._mixins import TimestampMixin


class Reservation(Base, TimestampMixin):
    __tablename__ = "reservations"
    __table_args__ = (CheckConstraint("seat_id IS NOT NULL OR table_id IS NOT NULL", name="resource_required"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Shared by the per-seat rows of one multi-seat booking
    booking_ref: Mapped[str] = mapped_column(String(36), nullable=False, index=True, default=lambda: str(uuid.uuid4()))

    venue_id: Mapped[str] = mapped_column(String(36), ForeignKey("venues.id"), nullable=False, index=True)
    table_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("tables.id"), nullable=True, index=True)
    seat_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("seats.id"), nullable=True, index=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    start_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    end_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    seat_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")  # active/cancelled

    cancelled_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    cancel_reason: Mapped[str] = mapped_column(String(255), nullable=False, default="")
