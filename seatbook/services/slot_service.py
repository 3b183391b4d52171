from __future__ import annotations

from datetime import date, datetime

from seatbook.core.config import get_settings
from seatbook.domain.types import CanonicalHours
from seatbook.services.hours_service import day_interval
from seatbook.services.time_utils import DAY_ABBREV, day_of_week, get_zone, local_to_utc


def get_open_intervals_for_date(canonical: CanonicalHours, day: date) -> list[tuple[int, int]]:
    """Open intervals, in venue-local minutes since midnight, for a calendar day."""
    dow = day_of_week(day)
    interval, _ = day_interval(canonical.row_for(dow), DAY_ABBREV[dow])
    return [interval] if interval else []


def get_slot_times_for_date(
    canonical: CanonicalHours,
    day: date,
    *,
    slot_minutes: int | None = None,
) -> list[tuple[datetime, datetime]]:
    slot_minutes = slot_minutes or get_settings().slot_minutes
    tz = get_zone(canonical.timezone, get_settings().default_timezone)
    slots: list[tuple[datetime, datetime]] = []
    for start_min, end_min in get_open_intervals_for_date(canonical, day):
        m = -(-start_min // slot_minutes) * slot_minutes
        while m + slot_minutes <= end_min:
            start, end = local_to_utc(day, m, tz), local_to_utc(day, m + slot_minutes, tz)
            # Wall times inside a DST gap collapse onto the same instants
            if end > start and (not slots or start >= slots[-1][1]):
                slots.append((start, end))
            m += slot_minutes
    return slots
