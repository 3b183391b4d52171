from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from seatbook.db.base import Base
from seatbook.models._mixins import TimestampMixin


class VenueTable(Base, TimestampMixin):
    __tablename__ = "tables"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    venue_id: Mapped[str] = mapped_column(String(36), ForeignKey("venues.id"), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    booking_mode: Mapped[str] = mapped_column(String(16), nullable=False, default="individual")  # individual/group
    seat_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    table_price_per_hour: Mapped[float | None] = mapped_column(Float, nullable=True)  # group mode only
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    directions_text: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    image_urls: Mapped[Any] = mapped_column(JSON, nullable=True)

    venue: Mapped["Venue"] = relationship("Venue", back_populates="tables")
    seats: Mapped[list["Seat"]] = relationship("Seat", back_populates="table", cascade="all, delete-orphan")
