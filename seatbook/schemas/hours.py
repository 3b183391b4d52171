from __future__ import annotations

from pydantic import BaseModel, Field

from seatbook.domain.enums import HoursSource


class DayHours(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    is_closed: bool = False
    open_time: str | None = Field(default=None, examples=["09:00"])
    close_time: str | None = Field(default=None, examples=["23:59"])


class ManualHoursUpdate(BaseModel):
    days: list[DayHours] = Field(min_length=7, max_length=7)


class PeriodPoint(BaseModel):
    day: int = Field(ge=0, le=6)
    hour: int = Field(ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)


class ImportedPeriod(BaseModel):
    open: PeriodPoint
    close: PeriodPoint | None = None


class ImportedHoursSync(BaseModel):
    periods: list[ImportedPeriod] = Field(default_factory=list)
    # True switches precedence to the imported schedule
    make_authoritative: bool = False


class HoursOut(BaseModel):
    venue_id: str
    timezone: str
    hours_source: HoursSource | None
    weekly_hours: list[DayHours]
    weekly_text: list[str]
