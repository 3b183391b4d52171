from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from seatbook.core.config import get_settings
from seatbook.core.deps import get_actor_id, get_db, get_now
from seatbook.models.reservation import Reservation
from seatbook.models.seat import Seat
from seatbook.models.seat_block import SeatBlock
from seatbook.models.table import VenueTable
from seatbook.schemas.audit import AuditLogOut
from seatbook.schemas.venue import ConsoleReservationOut, ConsoleSeatOut, VenueConsoleOut, VenueOut, VenueStatusUpdate
from seatbook.services.audit_service import list_venue_audit_logs
from seatbook.services.hours_service import canonical_hours_for_venue
from seatbook.services.operations_service import is_seat_blocked, reservation_phase
from seatbook.services.time_utils import get_zone, local_day_bounds
from seatbook.services.venue_service import get_venue_or_404, set_venue_status

router = APIRouter()


@router.get("/{venue_id}", response_model=VenueOut)
def get_venue(venue_id: str, db: Session = Depends(get_db)):
    return get_venue_or_404(db, venue_id)


@router.patch("/{venue_id}/status", response_model=VenueOut)
def update_status(
    venue_id: str,
    payload: VenueStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    actor_id: str | None = Depends(get_actor_id),
):
    venue = get_venue_or_404(db, venue_id)
    return set_venue_status(db, venue=venue, status=payload.status, pause_message=payload.pause_message, actor_id=actor_id, request=request)


@router.get("/{venue_id}/audit-logs", response_model=list[AuditLogOut])
def venue_audit_logs(
    venue_id: str,
    action_type: str | None = None,
    limit: int = Query(default=200, ge=1, le=500),
    db: Session = Depends(get_db),
):
    get_venue_or_404(db, venue_id)
    return list_venue_audit_logs(db, venue_id=venue_id, action_type=action_type, limit=limit)


@router.get("/{venue_id}/console", response_model=VenueConsoleOut)
def venue_console(venue_id: str, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    """Today's reservations and the seats held by a block right now."""
    venue = get_venue_or_404(db, venue_id)
    canonical = canonical_hours_for_venue(venue)
    tz = get_zone(canonical.timezone, get_settings().default_timezone)
    day_start, day_end = local_day_bounds(now.astimezone(tz).date(), tz)

    reservations = db.execute(
        select(Reservation)
        .where(Reservation.venue_id == venue.id, Reservation.start_at < day_end, Reservation.end_at > day_start)
        .order_by(Reservation.start_at)
    ).scalars().all()
    blocks = db.execute(
        select(SeatBlock).where(SeatBlock.venue_id == venue.id, SeatBlock.start_at <= now, SeatBlock.end_at > now)
    ).scalars().all()
    seats = db.execute(
        select(Seat).join(VenueTable, Seat.table_id == VenueTable.id).where(VenueTable.venue_id == venue.id).order_by(Seat.table_id, Seat.position)
    ).scalars().all()

    return VenueConsoleOut(
        venue_id=venue.id,
        reservations=[
            ConsoleReservationOut(
                id=r.id,
                booking_ref=r.booking_ref,
                seat_id=r.seat_id,
                table_id=r.table_id,
                start_at=r.start_at,
                end_at=r.end_at,
                seat_count=r.seat_count,
                status=r.status,
                phase=reservation_phase(r, now),
            )
            for r in reservations
        ],
        seats=[ConsoleSeatOut(id=s.id, table_id=s.table_id, label=s.label, is_blocked=is_seat_blocked(s.id, blocks, now)) for s in seats],
    )
