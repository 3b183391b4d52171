"""Checks that a proposed [start, end) window lies inside opening hours."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from seatbook.core.config import get_settings
from seatbook.domain.types import CanonicalHours
from seatbook.services.slot_service import get_open_intervals_for_date
from seatbook.services.time_utils import MINUTES_PER_DAY, get_zone, local_minutes

NOT_OPEN_MESSAGE = "This venue isn't open at this time. Please check opening hours."
NOT_OPEN_SPAN_MESSAGE = "This venue isn't open during the entire selected period."
TOO_MANY_DAYS_MESSAGE = "Reservations cannot span more than two calendar days."
INVALID_RANGE_MESSAGE = "End time must be after start time."


class WindowError(str, Enum):
    INVALID_RANGE = "INVALID_RANGE"
    TOO_LONG = "TOO_LONG"
    TOO_MANY_DAYS = "TOO_MANY_DAYS"
    OUTSIDE_HOURS = "OUTSIDE_HOURS"


@dataclass(frozen=True)
class WindowValidation:
    is_valid: bool
    error: str | None = None
    reason: WindowError | None = None


def _fail(reason: WindowError, message: str) -> WindowValidation:
    return WindowValidation(is_valid=False, error=message, reason=reason)


def validate_window(
    canonical: CanonicalHours,
    start_at: datetime,
    end_at: datetime,
    *,
    max_hours: int | None = None,
) -> WindowValidation:
    max_hours = max_hours or get_settings().max_reservation_hours
    if end_at <= start_at:
        return _fail(WindowError.INVALID_RANGE, INVALID_RANGE_MESSAGE)
    if end_at - start_at > timedelta(hours=max_hours):
        return _fail(WindowError.TOO_LONG, f"Reservations cannot exceed {max_hours} hours.")

    tz = get_zone(canonical.timezone, get_settings().default_timezone)
    local_start = start_at.astimezone(tz)
    local_end = end_at.astimezone(tz)

    start_day, start_min = local_start.date(), local_minutes(local_start)
    end_day, end_min = local_end.date(), local_minutes(local_end)
    # Ending exactly at midnight belongs to the previous day
    if end_min == 0:
        end_day, end_min = end_day - timedelta(days=1), MINUTES_PER_DAY

    if start_day == end_day:
        fits = any(lo <= start_min and end_min <= hi for lo, hi in get_open_intervals_for_date(canonical, start_day))
        return WindowValidation(is_valid=True) if fits else _fail(WindowError.OUTSIDE_HOURS, NOT_OPEN_MESSAGE)

    if end_day - start_day > timedelta(days=1):
        return _fail(WindowError.TOO_MANY_DAYS, TOO_MANY_DAYS_MESSAGE)

    first_fits = any(
        lo <= start_min and hi >= MINUTES_PER_DAY for lo, hi in get_open_intervals_for_date(canonical, start_day)
    )
    second_fits = any(lo <= 0 and end_min <= hi for lo, hi in get_open_intervals_for_date(canonical, end_day))
    if not (first_fits and second_fits):
        return _fail(WindowError.OUTSIDE_HOURS, NOT_OPEN_SPAN_MESSAGE)
    return WindowValidation(is_valid=True)
