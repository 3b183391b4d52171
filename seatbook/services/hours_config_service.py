"""Writes that feed the hours resolver: manual schedules and imported periods."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from fastapi import HTTPException, Request
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from seatbook.domain.enums import HoursSource
from seatbook.domain.types import HoursRow
from seatbook.models.venue import Venue
from seatbook.models.venue_hours import VenueHours
from seatbook.services.audit_service import write_audit_log
from seatbook.services.time_utils import DAY_ABBREV, END_OF_DAY, close_minutes, format_hhmm, parse_hhmm

logger = logging.getLogger(__name__)


def validate_day(row: HoursRow) -> None:
    if row.is_closed:
        return
    label = DAY_ABBREV[row.day_of_week]
    open_min = parse_hhmm(row.open_time)
    close_min = close_minutes(row.close_time)
    if open_min is None or close_min is None:
        raise HTTPException(status_code=400, detail=f"{label}: open and close must be HH:MM")
    if close_min <= open_min:
        raise HTTPException(status_code=400, detail=f"{label}: close time must be after open time")


def set_manual_hours(
    db: Session,
    *,
    venue: Venue,
    days: Iterable[HoursRow],
    actor_id: str | None = None,
    request: Request | None = None,
) -> list[VenueHours]:
    """Replace the venue's schedule with a full manual week and switch precedence to manual."""
    by_day = {d.day_of_week: d for d in days}
    if sorted(by_day) != list(range(7)):
        raise HTTPException(status_code=400, detail="A manual schedule must include all 7 days")
    for row in by_day.values():
        validate_day(row)

    db.execute(delete(VenueHours).where(VenueHours.venue_id == venue.id))
    created: list[VenueHours] = []
    for d in range(7):
        row = by_day[d]
        vh = VenueHours(
            venue_id=venue.id,
            day_of_week=d,
            is_closed=row.is_closed,
            open_time=None if row.is_closed else row.open_time,
            close_time=None if row.is_closed else row.close_time,
            source=HoursSource.MANUAL.value,
        )
        db.add(vh)
        created.append(vh)
    venue.hours_source = HoursSource.MANUAL.value
    db.commit()

    logger.info("Manual hours saved for venue %s", venue.id)
    write_audit_log(
        db,
        venue_id=venue.id,
        actor_id=actor_id,
        action_type="HOURS_MANUAL_SET",
        target_type="venue",
        target_id=venue.id,
        summary="Saved manual weekly hours",
        diff_json={"days": [{"day": r.day_of_week, "closed": r.is_closed, "open": r.open_time, "close": r.close_time} for r in by_day.values()]},
        request=request,
    )
    return created


def _merge_open(day: dict[str, Any], open_time: str, close_time: str) -> None:
    if day["is_closed"]:
        day.update(is_closed=False, open_time=open_time, close_time=close_time)
        return
    if day["open_time"] is None or day["open_time"] > open_time:
        day["open_time"] = open_time
    if day["close_time"] is None or day["close_time"] < close_time:
        day["close_time"] = close_time


def parse_imported_periods(periods: Iterable[Mapping[str, Any]] | None) -> list[HoursRow]:
    """Fold an imported period list into one row per day.

    Each period looks like ``{"open": {"day", "hour", "minute"}, "close": {...}}``.
    Multiple periods on a day widen to their envelope. Overnight periods are
    split into ``open..23:59`` and ``00:00..close``; a missing close means
    open until end of day.
    """
    days: list[dict[str, Any]] = [{"is_closed": True, "open_time": None, "close_time": None} for _ in range(7)]
    for period in periods or []:
        opening = period.get("open") if isinstance(period, Mapping) else None
        if not opening:
            continue
        open_day = int(opening.get("day", 0)) % 7
        open_time = format_hhmm(int(opening.get("hour", 0)) * 60 + int(opening.get("minute", 0)))

        closing = period.get("close")
        if not closing:
            _merge_open(days[open_day], open_time, END_OF_DAY)
            continue

        close_day = int(closing.get("day", open_day)) % 7
        close_min = int(closing.get("hour", 0)) * 60 + int(closing.get("minute", 0))
        close_time = format_hhmm(close_min)
        if close_day == open_day:
            _merge_open(days[open_day], open_time, close_time)
            continue

        _merge_open(days[open_day], open_time, END_OF_DAY)
        # A period ending exactly at midnight contributes nothing to the next day
        if close_min > 0:
            _merge_open(days[close_day], "00:00", close_time)

    return [
        HoursRow(day_of_week=d, is_closed=v["is_closed"], open_time=v["open_time"], close_time=v["close_time"], source=HoursSource.IMPORTED)
        for d, v in enumerate(days)
    ]


def sync_imported_hours(
    db: Session,
    *,
    venue: Venue,
    rows: Iterable[HoursRow],
    actor_id: str | None = None,
    request: Request | None = None,
) -> list[int]:
    """Upsert imported rows; days with a manual row are left alone when the venue is on manual hours.

    Returns the days that were written.
    """
    existing = {
        r.day_of_week: r
        for r in db.execute(select(VenueHours).where(VenueHours.venue_id == venue.id)).scalars().all()
    }
    keep_manual = venue.hours_source == HoursSource.MANUAL.value

    written: list[int] = []
    for row in rows:
        current = existing.get(row.day_of_week)
        if current is not None and keep_manual and current.source == HoursSource.MANUAL.value:
            continue
        if current is None:
            current = VenueHours(venue_id=venue.id, day_of_week=row.day_of_week)
            db.add(current)
        current.is_closed = row.is_closed
        current.open_time = row.open_time
        current.close_time = row.close_time
        current.source = HoursSource.IMPORTED.value
        written.append(row.day_of_week)
    db.commit()

    logger.info("Imported hours synced for venue %s (days=%s)", venue.id, written)
    write_audit_log(
        db,
        venue_id=venue.id,
        actor_id=actor_id,
        action_type="HOURS_IMPORT_SYNC",
        target_type="venue",
        target_id=venue.id,
        summary="Synced imported weekly hours",
        diff_json={"days": written, "kept_manual": keep_manual},
        request=request,
    )
    return sorted(written)


def switch_to_imported(
    db: Session,
    *,
    venue: Venue,
    periods: Iterable[Mapping[str, Any]],
    actor_id: str | None = None,
    request: Request | None = None,
) -> list[int]:
    """Make the imported schedule authoritative and overwrite every day from it."""
    venue.hours_source = HoursSource.IMPORTED.value
    db.flush()
    return sync_imported_hours(db, venue=venue, rows=parse_imported_periods(periods), actor_id=actor_id, request=request)
