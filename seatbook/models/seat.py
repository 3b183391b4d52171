from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from seatbook.db.base import Base
from seatbook.models._mixins import TimestampMixin


class Seat(Base, TimestampMixin):
    __tablename__ = "seats"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    table_id: Mapped[str] = mapped_column(String(36), ForeignKey("tables.id"), nullable=False, index=True)

    label: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    price_per_hour: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    tags: Mapped[Any] = mapped_column(JSON, nullable=True)
    image_urls: Mapped[Any] = mapped_column(JSON, nullable=True)

    table: Mapped["VenueTable"] = relationship("VenueTable", back_populates="seats")
