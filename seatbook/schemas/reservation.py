from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReservationCreate(BaseModel):
    venue_id: str
    start_at: datetime
    end_at: datetime
    seat_ids: list[str] | None = None
    table_id: str | None = None
    seat_count: int | None = Field(default=None, ge=1)
    user_id: str | None = Field(default=None, max_length=64)


class ReservationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    booking_ref: str
    venue_id: str
    table_id: str | None
    seat_id: str | None
    start_at: datetime
    end_at: datetime
    seat_count: int
    amount_cents: int
    status: str
    cancelled_at: datetime | None = None


class BookingOut(BaseModel):
    booking_ref: str
    reservations: list[ReservationOut]
    total_price_per_hour: float
    hours: float
    amount_cents: int


class ReservationCancelRequest(BaseModel):
    reason: str = Field(default="", max_length=255)
