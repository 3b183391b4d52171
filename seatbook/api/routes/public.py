from __future__ import annotations

from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from seatbook.core.deps import get_db, get_now
from seatbook.models.reservation import Reservation
from seatbook.schemas.availability import (
    AvailabilityOut,
    DateAvailabilityOut,
    GroupTableOut,
    SeatGroupOut,
    SeatOut,
    SlotOut,
    WindowAvailabilityOut,
)
from seatbook.schemas.reservation import BookingOut, ReservationCancelRequest, ReservationCreate, ReservationOut
from seatbook.schemas.venue import OpenStatusOut, VenueInfoOut
from seatbook.services.availability_service import (
    GroupTableOption,
    SeatOption,
    compute_availability_label,
    get_date_availability,
    get_window_availability,
    load_overlapping_bookings,
)
from seatbook.services.booking_guard import get_venue_bookability
from seatbook.services.hours_service import canonical_hours_for_venue, format_weekly_hours
from seatbook.services.open_status import get_open_status
from seatbook.services.reservation_service import cancel_reservation, create_reservation
from seatbook.services.time_utils import ensure_aware
from seatbook.services.venue_service import get_venue_or_404, load_inventory, normalize_string_list

router = APIRouter()


def _seat_out(option: SeatOption) -> SeatOut:
    s = option.seat
    return SeatOut(
        id=s.id,
        table_id=s.table_id,
        table_name=option.table_name,
        label=s.label,
        position=s.position,
        price_per_hour=s.price_per_hour,
        tags=list(s.tags),
        image_urls=list(s.image_urls),
        next_available_at=option.next_available_at,
    )


def _group_table_out(option: GroupTableOption) -> GroupTableOut:
    t = option.table
    return GroupTableOut(
        id=t.id,
        name=t.name,
        seat_count=t.seat_count,
        price_per_hour=t.price_per_hour,
        image_urls=list(t.image_urls),
        next_available_at=option.next_available_at,
    )


@router.get("/venues/{venue_id}", response_model=VenueInfoOut)
def venue_info(venue_id: str, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    venue = get_venue_or_404(db, venue_id)
    canonical = canonical_hours_for_venue(venue)
    status = get_open_status(canonical, now)
    capacity = load_inventory(db, venue.id).total_capacity()
    bookings = load_overlapping_bookings(db, venue.id, now - timedelta(hours=1), now + timedelta(hours=14))
    bookability = get_venue_bookability(venue)

    return VenueInfoOut(
        id=venue.id,
        name=venue.name,
        timezone=canonical.timezone,
        tags=normalize_string_list(venue.tags),
        image_urls=normalize_string_list(venue.image_urls),
        weekly_hours=format_weekly_hours(canonical),
        open_status=OpenStatusOut(
            is_open=status.is_open,
            status=status.status,
            today_label=status.today_label,
            today_hours_text=status.today_hours_text,
            next_open_at=status.next_open_at,
            diagnostic_message=status.diagnostic_message,
        ),
        availability_label=compute_availability_label(capacity, bookings, status, now=now, timezone=canonical.timezone),
        capacity=capacity,
        booking_disabled=not bookability.can_book,
        pause_message=bookability.pause_message,
    )


@router.get("/venues/{venue_id}/availability", response_model=AvailabilityOut)
def venue_availability(
    venue_id: str,
    start_at: datetime | None = None,
    end_at: datetime | None = None,
    date_: date | None = Query(default=None, alias="date"),
    seat_count: int = Query(default=1, ge=1),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    if date_ is not None:
        if start_at is not None or end_at is not None:
            raise HTTPException(status_code=400, detail="Use either start_at/end_at or date, not both")
        result = get_date_availability(db, venue_id=venue_id, day=date_)
        return DateAvailabilityOut(
            capacity=result.capacity,
            slots=[SlotOut(start=s.start, end=s.end, available_seats=s.available_seats, is_fully_booked=s.is_fully_booked) for s in result.slots],
            error=result.error,
        )

    if start_at is None or end_at is None:
        raise HTTPException(status_code=400, detail="start_at and end_at are required")
    start_at, end_at = ensure_aware(start_at), ensure_aware(end_at)
    if end_at <= start_at:
        raise HTTPException(status_code=400, detail="end_at must be after start_at")

    result = get_window_availability(db, venue_id=venue_id, start_at=start_at, end_at=end_at, seat_count=seat_count, now=now)
    return WindowAvailabilityOut(
        available_seats=[_seat_out(o) for o in result.available_seats],
        unavailable_seats=[_seat_out(o) for o in result.unavailable_seats],
        available_seat_groups=[
            SeatGroupOut(
                table_id=g.table_id,
                table_name=g.table_name,
                seats=[_seat_out(SeatOption(seat=s, table_name=g.table_name)) for s in g.seats],
                total_price_per_hour=g.total_price_per_hour,
            )
            for g in result.available_seat_groups
        ],
        available_group_tables=[_group_table_out(o) for o in result.available_group_tables],
        unavailable_group_tables=[_group_table_out(o) for o in result.unavailable_group_tables],
        unavailable_seat_ids=result.unavailable_seat_ids,
        booking_disabled=result.booking_disabled,
        pause_message=result.pause_message,
        error=result.error,
        error_code=result.error_code,
    )


@router.post("/reservations", response_model=BookingOut, status_code=201)
def create_booking(payload: ReservationCreate, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    result = create_reservation(
        db,
        venue_id=payload.venue_id,
        start_at=ensure_aware(payload.start_at),
        end_at=ensure_aware(payload.end_at),
        now=now,
        seat_ids=payload.seat_ids,
        table_id=payload.table_id,
        seat_count=payload.seat_count,
        user_id=payload.user_id,
    )
    return BookingOut(
        booking_ref=result.booking_ref,
        reservations=[ReservationOut.model_validate(r) for r in result.reservations],
        total_price_per_hour=result.total_price_per_hour,
        hours=result.hours,
        amount_cents=result.amount_cents,
    )


@router.get("/reservations/{reservation_id}", response_model=ReservationOut)
def get_reservation(reservation_id: str, db: Session = Depends(get_db)):
    r = db.get(Reservation, reservation_id)
    if not r:
        raise HTTPException(status_code=404, detail="Not found")
    return r


@router.post("/reservations/{reservation_id}/cancel", response_model=list[ReservationOut])
def cancel_booking(
    reservation_id: str,
    payload: ReservationCancelRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    r = db.get(Reservation, reservation_id)
    if not r:
        raise HTTPException(status_code=404, detail="Not found")
    return cancel_reservation(db, reservation=r, now=now, reason=payload.reason)
