from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
END_OF_DAY = "23:59"
DAY_ABBREV = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_hhmm(value: str | None) -> int | None:
    """Parse ``HH:MM`` into minutes since midnight, or None when malformed."""
    if not value or not isinstance(value, str):
        return None
    m = _HHMM_RE.match(value.strip())
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def close_minutes(close_time: str | None) -> int | None:
    """Like parse_hhmm, but ``23:59`` means open until midnight (1440)."""
    if close_time is not None and close_time.strip() == END_OF_DAY:
        return MINUTES_PER_DAY
    return parse_hhmm(close_time)


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_minutes(minutes: int) -> str:
    """Minutes since midnight as ``9:00 AM``; 1440 renders as ``12:00 AM``."""
    total_hours = minutes // 60
    h = total_hours % 24
    m = minutes % 60
    period = "PM" if 12 <= total_hours < 24 else "AM"
    display_h = 12 if h == 0 else (h - 12 if h > 12 else h)
    return f"{display_h}:{m:02d} {period}"


def format_clock(at: datetime, tz: ZoneInfo) -> str:
    local = at.astimezone(tz)
    return format_minutes(local.hour * 60 + local.minute)


def get_zone(name: str | None, default: str) -> ZoneInfo:
    """Resolve an IANA zone, falling back to ``default`` when unset or unknown."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r, using %s", name, default)
    return ZoneInfo(default)


def day_of_week(d: date) -> int:
    """0 = Sunday .. 6 = Saturday."""
    return (d.weekday() + 1) % 7


def local_minutes(local: datetime) -> float:
    return local.hour * 60 + local.minute + local.second / 60 + local.microsecond / 60_000_000


def local_to_utc(day: date, minutes: int, tz: ZoneInfo) -> datetime:
    """Instant at which the venue wall clock reads ``day`` + ``minutes``.

    Solved by iterating on the offset actually observed at each candidate
    instead of assuming a fixed one, so DST transitions land correctly.
    Wall times skipped by a spring-forward gap resolve past the gap.
    """
    target = datetime.combine(day, time()) + timedelta(minutes=minutes)
    guess = target.replace(tzinfo=timezone.utc)
    previous = guess
    for _ in range(4):
        observed = guess.astimezone(tz).replace(tzinfo=None)
        delta = target - observed
        if not delta:
            return guess
        previous, guess = guess, guess + delta
    return max(previous, guess)


def local_day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    return local_to_utc(day, 0, tz), local_to_utc(day + timedelta(days=1), 0, tz)


def ceil_to_slot(at: datetime, slot_minutes: int = 15) -> datetime:
    """Round up to the slot grid; an instant already on the grid is kept."""
    step = slot_minutes * 60
    epoch = int(at.timestamp())
    remainder = epoch % step
    if remainder == 0 and at.microsecond == 0:
        return at
    return datetime.fromtimestamp(epoch - remainder + step, tz=timezone.utc)


def next_slot_boundary(at: datetime, slot_minutes: int = 15) -> datetime:
    """First slot boundary strictly after ``at``."""
    step = slot_minutes * 60
    epoch = int(at.timestamp())
    return datetime.fromtimestamp(epoch - epoch % step + step, tz=timezone.utc)


def ensure_aware(at: datetime) -> datetime:
    """Treat naive input as UTC."""
    if at.tzinfo is None:
        return at.replace(tzinfo=timezone.utc)
    return at
