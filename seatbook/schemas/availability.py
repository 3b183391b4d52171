from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class SeatOut(BaseModel):
    id: str
    table_id: str
    table_name: str
    label: str
    position: int | None
    price_per_hour: float
    tags: list[str] = Field(default_factory=list)
    image_urls: list[str] = Field(default_factory=list)
    next_available_at: datetime | None = None


class SeatGroupOut(BaseModel):
    table_id: str
    table_name: str
    seats: list[SeatOut]
    total_price_per_hour: float


class GroupTableOut(BaseModel):
    id: str
    name: str
    seat_count: int
    price_per_hour: float | None
    image_urls: list[str] = Field(default_factory=list)
    next_available_at: datetime | None = None


class WindowAvailabilityOut(BaseModel):
    mode: Literal["window"] = "window"
    available_seats: list[SeatOut] = Field(default_factory=list)
    unavailable_seats: list[SeatOut] = Field(default_factory=list)
    available_seat_groups: list[SeatGroupOut] = Field(default_factory=list)
    available_group_tables: list[GroupTableOut] = Field(default_factory=list)
    unavailable_group_tables: list[GroupTableOut] = Field(default_factory=list)
    unavailable_seat_ids: list[str] = Field(default_factory=list)
    booking_disabled: bool = False
    pause_message: str | None = None
    error: str | None = None
    error_code: str | None = None


class SlotOut(BaseModel):
    start: datetime
    end: datetime
    available_seats: int
    is_fully_booked: bool


class DateAvailabilityOut(BaseModel):
    mode: Literal["date"] = "date"
    capacity: int
    slots: list[SlotOut] = Field(default_factory=list)
    error: str | None = None


AvailabilityOut = Annotated[WindowAvailabilityOut | DateAvailabilityOut, Field(discriminator="mode")]
