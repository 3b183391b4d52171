from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from seatbook.core.config import get_settings
from seatbook.domain.enums import OpenStatusKind
from seatbook.domain.types import CanonicalHours
from seatbook.services.hours_service import day_interval
from seatbook.services.time_utils import DAY_ABBREV, day_of_week, format_minutes, get_zone, local_minutes, local_to_utc


@dataclass(frozen=True)
class OpenStatus:
    is_open: bool
    status: OpenStatusKind
    today_label: str
    today_hours_text: str
    next_open_at: datetime | None = None
    diagnostic_message: str | None = None


def find_next_open(canonical: CanonicalHours, at: datetime, *, scan_days: int | None = None) -> datetime | None:
    """First opening strictly after ``at`` on one of the following days."""
    scan_days = scan_days or get_settings().next_open_scan_days
    tz = get_zone(canonical.timezone, get_settings().default_timezone)
    today = at.astimezone(tz).date()
    for offset in range(1, scan_days + 1):
        day = today + timedelta(days=offset)
        dow = day_of_week(day)
        interval, _ = day_interval(canonical.row_for(dow), DAY_ABBREV[dow])
        if interval is None:
            continue
        candidate = local_to_utc(day, interval[0], tz)
        if candidate > at:
            return candidate
    return None


def get_open_status(canonical: CanonicalHours, at: datetime, *, scan_days: int | None = None) -> OpenStatus:
    tz = get_zone(canonical.timezone, get_settings().default_timezone)
    local = at.astimezone(tz)
    dow = day_of_week(local.date())
    today_label = DAY_ABBREV[dow]
    row = canonical.row_for(dow)

    interval, diagnostic = day_interval(row, today_label)
    if interval is None:
        return OpenStatus(
            is_open=False,
            status=OpenStatusKind.CLOSED_TODAY,
            today_label=today_label,
            today_hours_text="Closed",
            next_open_at=find_next_open(canonical, at, scan_days=scan_days),
            diagnostic_message=diagnostic,
        )

    open_min, close_min = interval
    hours_text = f"{format_minutes(open_min)} – {format_minutes(close_min)}"
    now_min = local_minutes(local)

    if open_min <= now_min < close_min:
        return OpenStatus(is_open=True, status=OpenStatusKind.OPEN_NOW, today_label=today_label, today_hours_text=hours_text)

    if now_min < open_min:
        return OpenStatus(
            is_open=False,
            status=OpenStatusKind.OPENS_LATER,
            today_label=today_label,
            today_hours_text=hours_text,
            next_open_at=local_to_utc(local.date(), open_min, tz),
        )

    return OpenStatus(
        is_open=False,
        status=OpenStatusKind.CLOSED_NOW,
        today_label=today_label,
        today_hours_text="Closed",
        next_open_at=find_next_open(canonical, at, scan_days=scan_days),
    )
