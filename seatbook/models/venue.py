from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from seatbook.db.base import Base
from seatbook.models._mixins import TimestampMixin


class Venue(Base, TimestampMixin):
    __tablename__ = "venues"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # IANA zone name; falls back to settings.default_timezone when unset
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    hours_source: Mapped[str | None] = mapped_column(String(16), nullable=True)  # manual/imported

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")  # active/paused/deleted
    pause_message: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Legacy rows hold arrays, stringified arrays or null
    tags: Mapped[Any] = mapped_column(JSON, nullable=True)
    image_urls: Mapped[Any] = mapped_column(JSON, nullable=True)

    hours: Mapped[list["VenueHours"]] = relationship("VenueHours", back_populates="venue", cascade="all, delete-orphan")
    tables: Mapped[list["VenueTable"]] = relationship("VenueTable", back_populates="venue", cascade="all, delete-orphan")
