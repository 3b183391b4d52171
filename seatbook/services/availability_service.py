"""Availability engine: partitions venue inventory for a requested window.

``compute_window_availability`` is pure and works on the value types from
``seatbook.domain.types``; the ``get_*`` wrappers load rows for a venue and
handle the in-band business errors (hours, pause state, capacity).
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from seatbook.core.config import get_settings
from seatbook.domain.enums import ReservationStatus
from seatbook.domain.intervals import HasWindow, overlaps, window_overlaps
from seatbook.domain.types import BlockInterval, BookingInterval, GroupTable, IndividualTable, Inventory, SeatInfo
from seatbook.models.reservation import Reservation
from seatbook.models.seat_block import SeatBlock
from seatbook.services.adjacency import find_adjacent_run
from seatbook.services.booking_guard import get_venue_bookability
from seatbook.services.hours_service import canonical_hours_for_venue
from seatbook.services.next_available import estimate_next_available
from seatbook.services.open_status import OpenStatus
from seatbook.services.slot_service import get_slot_times_for_date
from seatbook.services.time_utils import DAY_NAMES, ceil_to_slot, day_of_week, format_clock, get_zone
from seatbook.services.venue_service import get_venue_or_404, load_inventory
from seatbook.services.window_validator import validate_window


@dataclass(frozen=True)
class SeatOption:
    seat: SeatInfo
    table_name: str
    next_available_at: datetime | None = None


@dataclass(frozen=True)
class SeatGroupOption:
    table_id: str
    table_name: str
    seats: tuple[SeatInfo, ...]
    total_price_per_hour: float


@dataclass(frozen=True)
class GroupTableOption:
    table: GroupTable
    next_available_at: datetime | None = None


@dataclass
class WindowAvailability:
    available_seats: list[SeatOption] = field(default_factory=list)
    unavailable_seats: list[SeatOption] = field(default_factory=list)
    available_seat_groups: list[SeatGroupOption] = field(default_factory=list)
    available_group_tables: list[GroupTableOption] = field(default_factory=list)
    unavailable_group_tables: list[GroupTableOption] = field(default_factory=list)
    unavailable_seat_ids: list[str] = field(default_factory=list)
    booking_disabled: bool = False
    pause_message: str | None = None
    error: str | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class SlotAvailability:
    start: datetime
    end: datetime
    available_seats: int
    is_fully_booked: bool


@dataclass
class DateAvailability:
    capacity: int
    slots: list[SlotAvailability] = field(default_factory=list)
    error: str | None = None


def capacity_error_message(capacity: int) -> str:
    return f"This venue only has {capacity} seat(s) available. Please select {capacity} or fewer seats."


def _seat_sort_key(seat: SeatInfo) -> tuple:
    return (seat.position is None, seat.position if seat.position is not None else 0, seat.label, seat.id)


def _is_offered(table: GroupTable, seat_count: int) -> bool:
    # A single-seat request may take any non-empty group table
    return table.seat_count >= max(seat_count, 1)


def compute_window_availability(
    *,
    inventory: Inventory,
    bookings: Sequence[BookingInterval],
    blocks: Sequence[BlockInterval],
    start_at: datetime,
    end_at: datetime,
    seat_count: int = 1,
    now: datetime | None = None,
) -> WindowAvailability:
    bookings = [b for b in bookings if window_overlaps(b, start_at, end_at)]
    blocks = [b for b in blocks if window_overlaps(b, start_at, end_at)]

    individual = inventory.individual_tables
    group_tables = inventory.group_tables
    all_tables = [t for t in inventory.tables if isinstance(t, IndividualTable)]

    unavailable_seat_ids: set[str] = {b.seat_id for b in bookings if b.seat_id is not None}
    unavailable_seat_ids.update(b.seat_id for b in blocks if b.seat_id is not None)

    venue_wide = any(b.is_venue_wide for b in blocks)
    if venue_wide:
        for table in all_tables:
            unavailable_seat_ids.update(s.id for s in table.seats)

    group_booked_tables = {b.table_id for b in bookings if b.is_group}
    for table in all_tables:
        if table.id in group_booked_tables:
            unavailable_seat_ids.update(s.id for s in table.seats)

    unavailable_group_ids = set(group_booked_tables)
    if venue_wide:
        unavailable_group_ids.update(t.id for t in group_tables)

    def seat_conflicts(seat: SeatInfo) -> list[HasWindow]:
        conflicts: list[HasWindow] = [
            b for b in bookings if b.seat_id == seat.id or (b.is_group and b.table_id == seat.table_id)
        ]
        conflicts.extend(b for b in blocks if b.seat_id == seat.id or b.is_venue_wide)
        return conflicts

    def table_conflicts(table: GroupTable) -> list[HasWindow]:
        conflicts: list[HasWindow] = [b for b in bookings if b.is_group and b.table_id == table.id]
        conflicts.extend(b for b in blocks if b.is_venue_wide)
        return conflicts

    result = WindowAvailability(unavailable_seat_ids=sorted(unavailable_seat_ids))

    free_by_table: dict[str, list[SeatInfo]] = {}
    for table in individual:
        for seat in sorted(table.active_seats, key=_seat_sort_key):
            if seat.id in unavailable_seat_ids:
                # Multi-seat requests list free seats only; taken seats surface via unavailable_seat_ids
                if seat_count == 1:
                    result.unavailable_seats.append(
                        SeatOption(
                            seat=seat,
                            table_name=table.name,
                            next_available_at=estimate_next_available(seat_conflicts(seat), start_at, now=now),
                        )
                    )
                continue
            free_by_table.setdefault(table.id, []).append(seat)
            result.available_seats.append(SeatOption(seat=seat, table_name=table.name))

    if seat_count > 1:
        for table in individual:
            run = find_adjacent_run(free_by_table.get(table.id, []), seat_count)
            if run:
                result.available_seat_groups.append(
                    SeatGroupOption(
                        table_id=table.id,
                        table_name=table.name,
                        seats=tuple(run),
                        total_price_per_hour=sum(s.price_per_hour for s in run),
                    )
                )

    for table in group_tables:
        if not _is_offered(table, seat_count):
            continue
        if table.id in unavailable_group_ids:
            result.unavailable_group_tables.append(
                GroupTableOption(table=table, next_available_at=estimate_next_available(table_conflicts(table), start_at, now=now))
            )
        else:
            result.available_group_tables.append(GroupTableOption(table=table))

    return result


def _to_booking(r: Reservation) -> BookingInterval:
    return BookingInterval(id=r.id, start_at=r.start_at, end_at=r.end_at, seat_id=r.seat_id, table_id=r.table_id, seat_count=r.seat_count)


def load_overlapping_bookings(db: Session, venue_id: str, start_at: datetime, end_at: datetime) -> list[BookingInterval]:
    rows = db.execute(
        select(Reservation).where(
            Reservation.venue_id == venue_id,
            Reservation.status != ReservationStatus.CANCELLED.value,
            Reservation.start_at < end_at,
            Reservation.end_at > start_at,
        )
    ).scalars().all()
    return [_to_booking(r) for r in rows]


def load_overlapping_blocks(db: Session, venue_id: str, start_at: datetime, end_at: datetime) -> list[BlockInterval]:
    rows = db.execute(
        select(SeatBlock).where(
            SeatBlock.venue_id == venue_id,
            SeatBlock.start_at < end_at,
            SeatBlock.end_at > start_at,
        )
    ).scalars().all()
    return [BlockInterval(id=b.id, start_at=b.start_at, end_at=b.end_at, seat_id=b.seat_id) for b in rows]


def get_window_availability(
    db: Session,
    *,
    venue_id: str,
    start_at: datetime,
    end_at: datetime,
    seat_count: int = 1,
    now: datetime | None = None,
) -> WindowAvailability:
    """Availability for one venue and window. Unknown venues raise 404."""
    venue = get_venue_or_404(db, venue_id)

    validation = validate_window(canonical_hours_for_venue(venue), start_at, end_at)
    if not validation.is_valid:
        return WindowAvailability(error=validation.error, error_code=validation.reason.value if validation.reason else None)

    bookability = get_venue_bookability(venue)
    if not bookability.can_book:
        return WindowAvailability(
            booking_disabled=True,
            pause_message=bookability.pause_message,
            error=bookability.pause_message,
            error_code=f"VENUE_{bookability.status.value.upper()}",
        )

    inventory = load_inventory(db, venue_id)
    capacity = inventory.total_capacity()
    if seat_count > capacity:
        return WindowAvailability(error=capacity_error_message(capacity), error_code="CAPACITY_EXCEEDED")

    return compute_window_availability(
        inventory=inventory,
        bookings=load_overlapping_bookings(db, venue_id, start_at, end_at),
        blocks=load_overlapping_blocks(db, venue_id, start_at, end_at),
        start_at=start_at,
        end_at=end_at,
        seat_count=seat_count,
        now=now,
    )


def get_date_availability(db: Session, *, venue_id: str, day: date) -> DateAvailability:
    """Per-slot remaining seat counts for one venue-local calendar day."""
    venue = get_venue_or_404(db, venue_id)
    canonical = canonical_hours_for_venue(venue)
    capacity = load_inventory(db, venue_id).total_capacity()
    if capacity <= 0:
        return DateAvailability(capacity=0, error="This venue has no seats configured.")

    slots = get_slot_times_for_date(canonical, day)
    if not slots:
        return DateAvailability(capacity=capacity)

    bookings = load_overlapping_bookings(db, venue_id, slots[0][0], slots[-1][1])
    out: list[SlotAvailability] = []
    for start, end in slots:
        booked = sum(b.seat_count for b in bookings if overlaps(b.start_at, b.end_at, start, end))
        remaining = max(capacity - booked, 0)
        out.append(SlotAvailability(start=start, end=end, available_seats=remaining, is_fully_booked=remaining == 0))
    return DateAvailability(capacity=capacity, slots=out)


def compute_availability_label(
    capacity: int,
    bookings: Sequence[BookingInterval],
    open_status: OpenStatus | None,
    *,
    now: datetime,
    timezone: str,
) -> str:
    """Short headline for venue cards, e.g. "Available now" or "Opens tomorrow at 9:00 AM"."""
    if capacity <= 0:
        return "Sold out for now"
    if open_status is None:
        return "Currently Closed"

    settings = get_settings()
    tz = get_zone(timezone, settings.default_timezone)

    if not open_status.is_open:
        next_open = open_status.next_open_at
        if next_open is None:
            return "Currently Closed"
        today = now.astimezone(tz).date()
        next_day = next_open.astimezone(tz).date()
        clock = format_clock(next_open, tz)
        if next_day == today:
            return f"Opens at {clock}"
        if next_day == today + timedelta(days=1):
            return f"Opens tomorrow at {clock}"
        return f"Opens {DAY_NAMES[day_of_week(next_day)]} at {clock}"

    start_base = ceil_to_slot(now, settings.slot_minutes)
    window = timedelta(minutes=settings.label_window_minutes)
    step = timedelta(minutes=settings.slot_minutes)
    horizon_end = start_base + timedelta(hours=settings.label_horizon_hours)
    window_start = start_base
    while window_start < horizon_end:
        window_end = window_start + window
        booked = sum(b.seat_count for b in bookings if overlaps(b.start_at, b.end_at, window_start, window_end))
        if booked < capacity:
            if window_start == start_base:
                return "Available now"
            return f"Next availability @ {format_clock(window_start, tz)}"
        window_start += step
    return "Sold out for now"
