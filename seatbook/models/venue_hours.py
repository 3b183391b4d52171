from __future__ import annotations

import uuid

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from seatbook.db.base import Base
from seatbook.models._mixins import TimestampMixin


class VenueHours(Base, TimestampMixin):
    __tablename__ = "venue_hours"
    __table_args__ = (UniqueConstraint("venue_id", "day_of_week", name="uq_venue_hours_venue_day"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    venue_id: Mapped[str] = mapped_column(String(36), ForeignKey("venues.id"), nullable=False, index=True)

    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0=Sun..6=Sat
    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    open_time: Mapped[str | None] = mapped_column(String(5), nullable=True)  # HH:MM venue-local
    close_time: Mapped[str | None] = mapped_column(String(5), nullable=True)  # "23:59" = end of day

    source: Mapped[str] = mapped_column(String(16), nullable=False, default="imported")  # manual/imported

    venue: Mapped["Venue"] = relationship("Venue", back_populates="hours")
