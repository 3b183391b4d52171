"""Canonical weekly hours: load a venue's rows and apply source precedence."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from seatbook.core.config import get_settings
from seatbook.domain.enums import HoursSource
from seatbook.domain.types import CanonicalHours, HoursRow
from seatbook.models.venue import Venue
from seatbook.services.time_utils import DAY_ABBREV, close_minutes, format_minutes, parse_hhmm

logger = logging.getLogger(__name__)


def parse_hours_source(value: Any) -> HoursSource | None:
    if value is None or value == "":
        return None
    if isinstance(value, HoursSource):
        return value
    if value == HoursSource.MANUAL.value:
        return HoursSource.MANUAL
    # "google" and anything else written by older importers
    return HoursSource.IMPORTED


def to_hours_row(row: Any) -> HoursRow:
    return HoursRow(
        day_of_week=int(row.day_of_week),
        is_closed=bool(row.is_closed),
        open_time=row.open_time,
        close_time=row.close_time,
        source=parse_hours_source(getattr(row, "source", None)) or HoursSource.IMPORTED,
    )


def resolve_canonical_hours(
    timezone: str | None,
    hours_source: HoursSource | None,
    rows: Iterable[HoursRow],
    *,
    default_timezone: str | None = None,
) -> CanonicalHours:
    """Merge raw rows into one row per day.

    When both sources have a row for a day, the one matching ``hours_source``
    wins; ``None`` means imported rows are authoritative. A day with a single
    row keeps it, a day with none is left out (closed).
    """
    preferred = hours_source or HoursSource.IMPORTED
    by_day: dict[int, HoursRow] = {}
    for row in rows:
        if not 0 <= row.day_of_week <= 6:
            continue
        current = by_day.get(row.day_of_week)
        if current is None or (current.source != preferred and row.source == preferred):
            by_day[row.day_of_week] = row

    return CanonicalHours(
        timezone=timezone or default_timezone or get_settings().default_timezone,
        weekly_hours=tuple(by_day[d] for d in sorted(by_day)),
    )


def canonical_hours_for_venue(venue: Venue, *, default_timezone: str | None = None) -> CanonicalHours:
    return resolve_canonical_hours(
        venue.timezone,
        parse_hours_source(venue.hours_source),
        [to_hours_row(r) for r in venue.hours],
        default_timezone=default_timezone,
    )


def get_canonical_hours(db: Session, venue_id: str) -> CanonicalHours | None:
    venue = db.execute(
        select(Venue).options(selectinload(Venue.hours)).where(Venue.id == venue_id)
    ).scalar_one_or_none()
    if venue is None:
        return None
    return canonical_hours_for_venue(venue)


def batch_get_canonical_hours(db: Session, venue_ids: list[str]) -> dict[str, CanonicalHours]:
    """Resolve many venues with a single round trip."""
    if not venue_ids:
        return {}
    venues = db.execute(
        select(Venue).options(selectinload(Venue.hours)).where(Venue.id.in_(venue_ids))
    ).scalars().all()
    return {v.id: canonical_hours_for_venue(v) for v in venues}


def day_interval(row: HoursRow | None, day_label: str = "") -> tuple[tuple[int, int] | None, str | None]:
    """Open interval in minutes for one day, plus a diagnostic when the row is broken.

    Closed or missing rows give ``(None, None)``. Malformed rows give
    ``(None, message)`` and are treated as closed.
    """
    if row is None or row.is_closed:
        return None, None
    open_min = parse_hhmm(row.open_time)
    close_min = close_minutes(row.close_time)
    if open_min is None or close_min is None:
        message = f"Invalid or missing open/close for {day_label}"
        logger.warning(message)
        return None, message
    if close_min <= open_min:
        message = f"Invalid open/close for {day_label} (close before or equal to open)"
        logger.warning(message)
        return None, message
    return (open_min, close_min), None


def format_weekly_hours(canonical: CanonicalHours) -> list[str]:
    """Seven display lines such as ``Mon: 9:00 AM – 5:00 PM`` or ``Tue: Closed``."""
    out: list[str] = []
    for d, label in enumerate(DAY_ABBREV):
        row = canonical.row_for(d)
        if row is None or row.is_closed:
            out.append(f"{label}: Closed")
            continue
        open_min = parse_hhmm(row.open_time)
        close_min = close_minutes(row.close_time)
        if open_min is None or close_min is None or close_min <= open_min:
            out.append(f"{label}: Closed")
            continue
        out.append(f"{label}: {format_minutes(open_min)} – {format_minutes(close_min)}")
    return out
