from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from seatbook.core.errors import ErrorCode, raise_booking_error
from seatbook.domain.enums import BookingMode, ReservationStatus
from seatbook.models.reservation import Reservation
from seatbook.models.seat import Seat
from seatbook.models.seat_block import SeatBlock
from seatbook.models.table import VenueTable
from seatbook.models.venue import Venue
from seatbook.services.availability_service import capacity_error_message
from seatbook.services.booking_guard import ensure_bookable
from seatbook.services.hours_service import canonical_hours_for_venue
from seatbook.services.venue_service import load_inventory
from seatbook.services.window_validator import WindowError, validate_window

logger = logging.getLogger(__name__)

SEATS_TAKEN_MESSAGE = "One or more seats are not available for that time."
TABLE_TAKEN_MESSAGE = "This table is not available for that time."
PAST_TIME_MESSAGE = "This time has already passed. Please choose a future time."


@dataclass
class BookingResult:
    booking_ref: str
    reservations: list[Reservation] = field(default_factory=list)
    total_price_per_hour: float = 0.0
    hours: float = 0.0
    amount_cents: int = 0


def quote_amount_cents(price_per_hour: float, start_at: datetime, end_at: datetime) -> int:
    hours = (end_at - start_at).total_seconds() / 3600
    return max(0, round(price_per_hour * hours * 100))


def _has_overlapping_reservation(db: Session, *, start_at: datetime, end_at: datetime, seat_ids: list[str], table_ids: list[str]) -> bool:
    resource = []
    if seat_ids:
        resource.append(Reservation.seat_id.in_(seat_ids))
    if table_ids:
        # Group rows lock the whole table
        resource.append(Reservation.table_id.in_(table_ids) & Reservation.seat_id.is_(None))
    q = (
        select(Reservation.id)
        .where(or_(*resource))
        .where(Reservation.status != ReservationStatus.CANCELLED.value)
        .where(Reservation.start_at < end_at)
        .where(Reservation.end_at > start_at)
        .limit(1)
    )
    return db.execute(q).first() is not None


def _has_blocking_hold(db: Session, *, venue_id: str, start_at: datetime, end_at: datetime, seat_ids: list[str]) -> bool:
    q = (
        select(SeatBlock.id)
        .where(SeatBlock.venue_id == venue_id)
        .where(or_(SeatBlock.seat_id.is_(None), SeatBlock.seat_id.in_(seat_ids)))
        .where(SeatBlock.start_at < end_at)
        .where(SeatBlock.end_at > start_at)
        .limit(1)
    )
    return db.execute(q).first() is not None


def _validate_request(db: Session, *, venue_id: str, start_at: datetime, end_at: datetime, now: datetime) -> Venue:
    if end_at <= start_at:
        raise_booking_error(ErrorCode.INVALID_RANGE, "End time must be after start time.")
    if start_at < now:
        raise_booking_error(ErrorCode.PAST_TIME, PAST_TIME_MESSAGE)

    venue = db.get(Venue, venue_id)
    if not venue:
        raise_booking_error(ErrorCode.VENUE_NOT_FOUND, "Venue not found.")
    ensure_bookable(venue)

    validation = validate_window(canonical_hours_for_venue(venue), start_at, end_at)
    if not validation.is_valid:
        code = ErrorCode.OUTSIDE_HOURS if validation.reason == WindowError.OUTSIDE_HOURS else ErrorCode.INVALID_RANGE
        raise_booking_error(code, validation.error or "Invalid reservation window.")
    return venue


def _commit_or_conflict(db: Session, message: str) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Reservation rejected by exclusion constraint")
        raise_booking_error(ErrorCode.CONFLICT, message)


def _book_group_table(
    db: Session,
    *,
    venue: Venue,
    table_id: str,
    seat_count: int | None,
    start_at: datetime,
    end_at: datetime,
    user_id: str | None,
) -> BookingResult:
    if db.get(Seat, table_id) is not None:
        raise_booking_error(ErrorCode.INVALID_RESOURCE, "Please select a table, not a seat.")

    table = db.execute(
        select(VenueTable).options(selectinload(VenueTable.seats)).where(VenueTable.id == table_id).with_for_update()
    ).scalar_one_or_none()
    if table is None:
        raise_booking_error(ErrorCode.RESOURCE_NOT_FOUND, "Table not found.")
    if table.venue_id != venue.id:
        raise_booking_error(ErrorCode.INVALID_RESOURCE, "Table does not belong to this venue.")
    if not table.is_active:
        raise_booking_error(ErrorCode.RESOURCE_DISABLED, "This table is not currently bookable.")
    if table.booking_mode != BookingMode.GROUP.value:
        raise_booking_error(ErrorCode.INVALID_RESOURCE, "This table is booked by individual seat.")

    table_size = table.seat_count or len(table.seats)
    if table_size < 1:
        raise_booking_error(ErrorCode.INVALID_RESOURCE, "This table has no seats.")
    if seat_count is not None and seat_count > table_size:
        raise_booking_error(ErrorCode.CAPACITY_EXCEEDED, f"This table only seats {table_size}.")

    seat_ids = [s.id for s in table.seats]
    if _has_overlapping_reservation(db, start_at=start_at, end_at=end_at, seat_ids=seat_ids, table_ids=[table.id]) or _has_blocking_hold(
        db, venue_id=venue.id, start_at=start_at, end_at=end_at, seat_ids=seat_ids
    ):
        db.rollback()
        logger.info("Group table %s taken for %s - %s", table.id, start_at, end_at)
        raise_booking_error(ErrorCode.CONFLICT, TABLE_TAKEN_MESSAGE)

    price = table.table_price_per_hour or 0.0
    result = BookingResult(booking_ref=str(uuid.uuid4()), total_price_per_hour=price, hours=(end_at - start_at).total_seconds() / 3600)
    result.amount_cents = quote_amount_cents(price, start_at, end_at)
    reservation = Reservation(
        booking_ref=result.booking_ref,
        venue_id=venue.id,
        table_id=table.id,
        seat_id=None,
        user_id=user_id,
        start_at=start_at,
        end_at=end_at,
        seat_count=table_size,
        amount_cents=result.amount_cents,
        status=ReservationStatus.ACTIVE.value,
    )
    db.add(reservation)
    _commit_or_conflict(db, TABLE_TAKEN_MESSAGE)
    result.reservations.append(reservation)
    return result


def _book_seats(
    db: Session,
    *,
    venue: Venue,
    seat_ids: list[str],
    start_at: datetime,
    end_at: datetime,
    user_id: str | None,
) -> BookingResult:
    wanted = list(dict.fromkeys(seat_ids))
    seats = db.execute(
        select(Seat).options(selectinload(Seat.table)).where(Seat.id.in_(wanted)).with_for_update()
    ).scalars().all()
    if len(seats) != len(wanted):
        raise_booking_error(ErrorCode.RESOURCE_NOT_FOUND, "One or more seats were not found.")

    by_id = {s.id: s for s in seats}
    ordered = [by_id[sid] for sid in wanted]
    for seat in ordered:
        if seat.table.venue_id != venue.id:
            raise_booking_error(ErrorCode.INVALID_RESOURCE, "One or more seats do not belong to this venue.")
        if not seat.is_active or not seat.table.is_active:
            raise_booking_error(ErrorCode.RESOURCE_DISABLED, "One or more seats are not currently bookable.")
        if seat.table.booking_mode == BookingMode.GROUP.value:
            raise_booking_error(ErrorCode.INVALID_RESOURCE, "Seats at a group table can only be booked as a whole table.")

    table_ids = sorted({s.table_id for s in ordered})
    if _has_overlapping_reservation(db, start_at=start_at, end_at=end_at, seat_ids=wanted, table_ids=table_ids) or _has_blocking_hold(
        db, venue_id=venue.id, start_at=start_at, end_at=end_at, seat_ids=wanted
    ):
        db.rollback()
        logger.info("Seats %s taken for %s - %s", wanted, start_at, end_at)
        raise_booking_error(ErrorCode.CONFLICT, SEATS_TAKEN_MESSAGE)

    result = BookingResult(
        booking_ref=str(uuid.uuid4()),
        total_price_per_hour=sum(s.price_per_hour for s in ordered),
        hours=(end_at - start_at).total_seconds() / 3600,
    )
    for seat in ordered:
        reservation = Reservation(
            booking_ref=result.booking_ref,
            venue_id=venue.id,
            table_id=seat.table_id,
            seat_id=seat.id,
            user_id=user_id,
            start_at=start_at,
            end_at=end_at,
            seat_count=1,
            amount_cents=quote_amount_cents(seat.price_per_hour, start_at, end_at),
            status=ReservationStatus.ACTIVE.value,
        )
        db.add(reservation)
        result.reservations.append(reservation)
    result.amount_cents = sum(r.amount_cents for r in result.reservations)
    _commit_or_conflict(db, SEATS_TAKEN_MESSAGE)
    return result


def create_reservation(
    db: Session,
    *,
    venue_id: str,
    start_at: datetime,
    end_at: datetime,
    now: datetime,
    seat_ids: list[str] | None = None,
    table_id: str | None = None,
    seat_count: int | None = None,
    user_id: str | None = None,
) -> BookingResult:
    """Validate and persist a booking for individual seats or a whole group table.

    The overlap re-check and the insert share one transaction, with the
    resource rows locked, so concurrent writers cannot both succeed. The
    exclusion constraints installed by ``scripts/init_db.py`` back this up.
    """
    if bool(seat_ids) == bool(table_id):
        raise_booking_error(ErrorCode.INVALID_RESOURCE, "Provide either seat_ids or table_id.")

    venue = _validate_request(db, venue_id=venue_id, start_at=start_at, end_at=end_at, now=now)

    requested = len(set(seat_ids)) if seat_ids else (seat_count or 1)
    capacity = load_inventory(db, venue.id).total_capacity()
    if requested > capacity:
        raise_booking_error(ErrorCode.CAPACITY_EXCEEDED, capacity_error_message(capacity))

    if table_id:
        result = _book_group_table(
            db, venue=venue, table_id=table_id, seat_count=seat_count, start_at=start_at, end_at=end_at, user_id=user_id
        )
    else:
        result = _book_seats(db, venue=venue, seat_ids=seat_ids or [], start_at=start_at, end_at=end_at, user_id=user_id)

    logger.info("Booking %s created at venue %s (%d row(s))", result.booking_ref, venue.id, len(result.reservations))
    return result


def cancel_reservation(db: Session, *, reservation: Reservation, now: datetime, reason: str = "") -> list[Reservation]:
    """Cancel a reservation together with the other rows of its booking. Idempotent."""
    rows = db.execute(
        select(Reservation).where(Reservation.booking_ref == reservation.booking_ref)
    ).scalars().all()
    for row in rows:
        if row.status == ReservationStatus.CANCELLED.value:
            continue
        row.status = ReservationStatus.CANCELLED.value
        row.cancel_reason = reason[:255]
        row.cancelled_at = now
    db.commit()
    return list(rows)
