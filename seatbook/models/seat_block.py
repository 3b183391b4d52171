from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from seatbook.db.base import Base
from seatbook.db.types import UTCDateTime
from seatbook.models._mixins import TimestampMixin


class SeatBlock(Base, TimestampMixin):
    __tablename__ = "seat_blocks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    venue_id: Mapped[str] = mapped_column(String(36), ForeignKey("venues.id"), nullable=False, index=True)
    # NULL blocks the whole venue
    seat_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("seats.id"), nullable=True, index=True)
    start_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    end_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    reason: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
