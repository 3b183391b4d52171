from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from seatbook.core.deps import get_actor_id, get_db
from seatbook.domain.enums import HoursSource
from seatbook.domain.types import HoursRow
from seatbook.schemas.hours import DayHours, HoursOut, ImportedHoursSync, ManualHoursUpdate
from seatbook.services.hours_config_service import parse_imported_periods, set_manual_hours, switch_to_imported, sync_imported_hours
from seatbook.services.hours_service import canonical_hours_for_venue, format_weekly_hours, parse_hours_source
from seatbook.services.venue_service import get_venue_or_404

router = APIRouter()


def _hours_out(db: Session, venue_id: str) -> HoursOut:
    venue = get_venue_or_404(db, venue_id)
    db.refresh(venue)
    canonical = canonical_hours_for_venue(venue)
    return HoursOut(
        venue_id=venue.id,
        timezone=canonical.timezone,
        hours_source=parse_hours_source(venue.hours_source),
        weekly_hours=[
            DayHours(day_of_week=r.day_of_week, is_closed=r.is_closed, open_time=r.open_time, close_time=r.close_time)
            for r in canonical.weekly_hours
        ],
        weekly_text=format_weekly_hours(canonical),
    )


@router.get("/{venue_id}/hours", response_model=HoursOut)
def get_hours(venue_id: str, db: Session = Depends(get_db)):
    return _hours_out(db, venue_id)


@router.put("/{venue_id}/hours", response_model=HoursOut)
def put_manual_hours(
    venue_id: str,
    payload: ManualHoursUpdate,
    request: Request,
    db: Session = Depends(get_db),
    actor_id: str | None = Depends(get_actor_id),
):
    venue = get_venue_or_404(db, venue_id)
    rows = [
        HoursRow(day_of_week=d.day_of_week, is_closed=d.is_closed, open_time=d.open_time, close_time=d.close_time, source=HoursSource.MANUAL)
        for d in payload.days
    ]
    set_manual_hours(db, venue=venue, days=rows, actor_id=actor_id, request=request)
    return _hours_out(db, venue_id)


@router.post("/{venue_id}/hours/import", response_model=HoursOut)
def import_hours(
    venue_id: str,
    payload: ImportedHoursSync,
    request: Request,
    db: Session = Depends(get_db),
    actor_id: str | None = Depends(get_actor_id),
):
    venue = get_venue_or_404(db, venue_id)
    periods = [p.model_dump() for p in payload.periods]
    if payload.make_authoritative:
        switch_to_imported(db, venue=venue, periods=periods, actor_id=actor_id, request=request)
    else:
        sync_imported_hours(db, venue=venue, rows=parse_imported_periods(periods), actor_id=actor_id, request=request)
    return _hours_out(db, venue_id)
