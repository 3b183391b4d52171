from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from seatbook.domain.enums import OpenStatusKind, VenueStatus


class VenueStatusUpdate(BaseModel):
    status: VenueStatus
    pause_message: str | None = Field(default=None, max_length=500)


class VenueOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    timezone: str | None
    hours_source: str | None
    status: str
    pause_message: str | None


class OpenStatusOut(BaseModel):
    is_open: bool
    status: OpenStatusKind
    today_label: str
    today_hours_text: str
    next_open_at: datetime | None = None
    diagnostic_message: str | None = None


class VenueInfoOut(BaseModel):
    id: str
    name: str
    timezone: str
    tags: list[str]
    image_urls: list[str]
    weekly_hours: list[str]
    open_status: OpenStatusOut
    availability_label: str
    capacity: int
    booking_disabled: bool
    pause_message: str | None = None


class ConsoleReservationOut(BaseModel):
    id: str
    booking_ref: str
    seat_id: str | None
    table_id: str | None
    start_at: datetime
    end_at: datetime
    seat_count: int
    status: str
    phase: str


class ConsoleSeatOut(BaseModel):
    id: str
    table_id: str
    label: str
    is_blocked: bool


class VenueConsoleOut(BaseModel):
    venue_id: str
    reservations: list[ConsoleReservationOut]
    seats: list[ConsoleSeatOut]
