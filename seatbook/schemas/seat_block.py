from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from seatbook.domain.enums import BlockDuration


class SeatBlockCreate(BaseModel):
    # Omit to block the whole venue
    seat_id: str | None = None
    duration: BlockDuration = BlockDuration.CUSTOM
    start_at: datetime | None = None
    end_at: datetime | None = None
    reason: str = Field(default="", max_length=255)


class SeatBlockOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    venue_id: str
    seat_id: str | None
    start_at: datetime
    end_at: datetime
    reason: str
