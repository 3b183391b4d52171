"""Tests for the availability engine against a seeded database."""
from datetime import date, datetime, timezone

import pytest
from fastapi import HTTPException

from seatbook.domain.enums import OpenStatusKind
from seatbook.domain.types import BookingInterval, GroupTable, IndividualTable, Inventory, SeatInfo
from seatbook.services.availability_service import (
    compute_availability_label,
    compute_window_availability,
    get_date_availability,
    get_window_availability,
)
from seatbook.services.open_status import OpenStatus


def mon(hour, minute=0):
    return datetime(2024, 3, 4, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def cafe(weekday_venue, make_table):
    """Weekday venue with one individual table of two seats."""
    table = make_table(weekday_venue, name="Window", seats=[("A", 1, 10.0), ("B", 2, 12.0)])
    seats = {s.label: s for s in table.seats}
    return weekday_venue, table, seats


def ids(options):
    return [o.seat.id for o in options]


# =============================================================================
# Single seat requests
# =============================================================================


@pytest.mark.integration
class TestSingleSeatAvailability:
    def test_everything_free(self, db_session, cafe, fixed_now):
        venue, _, seats = cafe
        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert result.error is None
        assert ids(result.available_seats) == [seats["A"].id, seats["B"].id]
        assert result.unavailable_seats == []
        assert result.unavailable_seat_ids == []
        assert result.available_seats[0].table_name == "Window"

    def test_overlapping_reservation_makes_seat_unavailable(self, db_session, cafe, make_reservation, fixed_now):
        venue, _, seats = cafe
        make_reservation(venue, mon(10, 30), mon(11, 30), seat=seats["A"])

        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert ids(result.available_seats) == [seats["B"].id]
        assert ids(result.unavailable_seats) == [seats["A"].id]
        assert result.unavailable_seats[0].next_available_at == mon(11, 30)
        assert result.unavailable_seat_ids == [seats["A"].id]

    def test_touching_reservation_does_not_conflict(self, db_session, cafe, make_reservation, fixed_now):
        venue, _, seats = cafe
        make_reservation(venue, mon(9), mon(10), seat=seats["A"])
        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert result.unavailable_seats == []

    def test_cancelled_reservations_are_ignored(self, db_session, cafe, make_reservation, fixed_now):
        venue, _, seats = cafe
        make_reservation(venue, mon(10), mon(11), seat=seats["A"], status="cancelled")
        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert len(result.available_seats) == 2

    def test_seat_block(self, db_session, cafe, make_block, fixed_now):
        venue, _, seats = cafe
        make_block(venue, mon(9), mon(12), seat=seats["B"])
        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert ids(result.unavailable_seats) == [seats["B"].id]
        assert result.unavailable_seats[0].next_available_at == mon(12)

    def test_block_outlasting_reservation_sets_next_available(self, db_session, cafe, make_reservation, make_block, fixed_now):
        venue, _, seats = cafe
        make_reservation(venue, mon(10), mon(11), seat=seats["A"])
        make_block(venue, mon(10), mon(14), seat=seats["A"])
        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert ids(result.unavailable_seats) == [seats["A"].id]
        assert result.unavailable_seats[0].next_available_at == mon(14)

    def test_table_level_booking_locks_its_seats(self, db_session, cafe, make_reservation, fixed_now):
        venue, table, seats = cafe
        make_reservation(venue, mon(9), mon(10, 20), table=table, seat_count=2)
        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert result.available_seats == []
        assert {o.next_available_at for o in result.unavailable_seats} == {mon(10, 30)}

    def test_inactive_seats_and_tables_are_hidden(self, db_session, weekday_venue, make_table, fixed_now):
        make_table(weekday_venue, name="Bar", seats=[("A", 1, 10.0), ("B", 2, 10.0, False)])
        make_table(weekday_venue, name="Closed", seats=[("C", 1, 10.0)], is_active=False)
        result = get_window_availability(db_session, venue_id=weekday_venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert [o.seat.label for o in result.available_seats] == ["A"]


# =============================================================================
# Business errors reported in-band
# =============================================================================


@pytest.mark.integration
class TestAvailabilityErrors:
    def test_outside_opening_hours(self, db_session, cafe, fixed_now):
        venue, _, _ = cafe
        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(16, 30), end_at=mon(18), now=fixed_now)
        assert result.error == "This venue isn't open at this time. Please check opening hours."
        assert result.error_code == "OUTSIDE_HOURS"
        assert result.available_seats == []

    def test_capacity_exceeded(self, db_session, weekday_venue, make_table, fixed_now):
        make_table(weekday_venue, seats=[(f"S{i}", i, 5.0) for i in range(1, 3)])
        make_table(weekday_venue, name="Booth", mode="group", seat_count=4, price=40.0)
        result = get_window_availability(
            db_session, venue_id=weekday_venue.id, start_at=mon(10), end_at=mon(11), seat_count=10, now=fixed_now
        )
        assert result.error == "This venue only has 6 seat(s) available. Please select 6 or fewer seats."
        assert result.error_code == "CAPACITY_EXCEEDED"

    def test_paused_venue(self, db_session, make_venue, make_table, fixed_now):
        venue = make_venue({1: ("09:00", "17:00")}, status="paused", pause_message="Back next week")
        make_table(venue, seats=[("A", 1, 10.0)])
        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert result.booking_disabled
        assert result.pause_message == "Back next week"
        assert result.error_code == "VENUE_PAUSED"
        assert result.available_seats == []

    def test_unknown_venue(self, db_session, fixed_now):
        with pytest.raises(HTTPException) as exc:
            get_window_availability(db_session, venue_id="nope", start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert exc.value.status_code == 404


# =============================================================================
# Group tables and multi-seat requests
# =============================================================================


@pytest.mark.integration
class TestGroupAndMultiSeat:
    def test_booked_group_table(self, db_session, weekday_venue, make_table, make_reservation, fixed_now):
        booth = make_table(weekday_venue, name="Booth", mode="group", seat_count=4)
        make_reservation(weekday_venue, mon(9), mon(12), table=booth)

        result = get_window_availability(db_session, venue_id=weekday_venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert result.available_group_tables == []
        [option] = result.unavailable_group_tables
        assert option.table.id == booth.id
        assert option.table.price_per_hour is None
        assert option.next_available_at == mon(12)
        assert result.available_seats == []

    def test_group_tables_offered_by_size(self, db_session, weekday_venue, make_table, fixed_now):
        make_table(weekday_venue, name="Big", mode="group", seat_count=4, price=40.0)
        make_table(weekday_venue, name="Small", mode="group", seat_count=2, price=20.0)

        four = get_window_availability(db_session, venue_id=weekday_venue.id, start_at=mon(10), end_at=mon(11), seat_count=4, now=fixed_now)
        assert [o.table.name for o in four.available_group_tables] == ["Big"]

        one = get_window_availability(db_session, venue_id=weekday_venue.id, start_at=mon(10), end_at=mon(11), seat_count=1, now=fixed_now)
        assert sorted(o.table.name for o in one.available_group_tables) == ["Big", "Small"]

    def test_adjacent_seat_groups(self, db_session, weekday_venue, make_table, make_reservation, fixed_now):
        table = make_table(weekday_venue, name="Bar", seats=[(f"S{p}", p, 10.0) for p in (1, 2, 3, 5, 6)])
        by_pos = {s.position: s for s in table.seats}
        make_reservation(weekday_venue, mon(10), mon(11), seat=by_pos[2])

        result = get_window_availability(db_session, venue_id=weekday_venue.id, start_at=mon(10), end_at=mon(11), seat_count=2, now=fixed_now)
        assert result.unavailable_seats == []
        assert sorted(o.seat.position for o in result.available_seats) == [1, 3, 5, 6]
        [group] = result.available_seat_groups
        assert [s.position for s in group.seats] == [5, 6]
        assert group.total_price_per_hour == 20.0
        assert group.table_name == "Bar"

    def test_multi_seat_request_reports_taken_seats_by_id_only(self, db_session, cafe, make_reservation, fixed_now):
        venue, _, seats = cafe
        make_reservation(venue, mon(10), mon(11), seat=seats["A"])
        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(10), end_at=mon(11), seat_count=2, now=fixed_now)
        assert result.unavailable_seats == []
        assert result.unavailable_seat_ids == [seats["A"].id]
        assert ids(result.available_seats) == [seats["B"].id]
        assert result.available_seat_groups == []

    def test_venue_wide_block(self, db_session, cafe, make_table, make_block, fixed_now):
        venue, _, seats = cafe
        booth = make_table(venue, name="Booth", mode="group", seat_count=4)
        make_block(venue, mon(10, 30), mon(10, 45))

        result = get_window_availability(db_session, venue_id=venue.id, start_at=mon(10), end_at=mon(11), now=fixed_now)
        assert result.available_seats == []
        assert sorted(ids(result.unavailable_seats)) == sorted(s.id for s in seats.values())
        assert [o.table.id for o in result.unavailable_group_tables] == [booth.id]
        assert {o.next_available_at for o in result.unavailable_seats} == {mon(10, 45)}
        assert result.unavailable_group_tables[0].next_available_at == mon(10, 45)


@pytest.mark.unit
class TestComputeWindowAvailability:
    """The pure calculator works on value types alone."""

    def test_partition(self):
        a = SeatInfo(id="a", table_id="t", label="A", position=1, price_per_hour=5.0)
        b = SeatInfo(id="b", table_id="t", label="B", position=2, price_per_hour=5.0)
        inventory = Inventory(
            tables=(
                IndividualTable(id="t", name="T", seats=(a, b)),
                GroupTable(id="g", name="G", seat_count=6, price_per_hour=None),
            )
        )
        bookings = [
            BookingInterval(id="r1", start_at=mon(10), end_at=mon(10, 7), seat_id="a", table_id="t"),
            BookingInterval(id="r2", start_at=mon(14), end_at=mon(15), seat_id="b", table_id="t"),
        ]
        result = compute_window_availability(
            inventory=inventory, bookings=bookings, blocks=[], start_at=mon(10), end_at=mon(11), now=mon(8)
        )
        assert ids(result.available_seats) == ["b"]
        assert result.unavailable_seats[0].next_available_at == mon(10, 15)
        assert [o.table.id for o in result.available_group_tables] == ["g"]
        assert inventory.total_capacity() == 8


# =============================================================================
# Date mode
# =============================================================================


@pytest.mark.integration
class TestDateAvailability:
    def test_slot_counts(self, db_session, make_venue, make_table, make_reservation):
        venue = make_venue({1: ("09:00", "10:00")})
        table = make_table(venue, seats=[("A", 1, 10.0), ("B", 2, 10.0)])
        make_reservation(venue, mon(9, 15), mon(9, 45), seat=table.seats[0])

        result = get_date_availability(db_session, venue_id=venue.id, day=date(2024, 3, 4))
        assert result.capacity == 2
        assert [s.available_seats for s in result.slots] == [2, 1, 1, 2]
        assert not any(s.is_fully_booked for s in result.slots)

    def test_fully_booked_slot(self, db_session, make_venue, make_table, make_reservation):
        venue = make_venue({1: ("09:00", "10:00")})
        booth = make_table(venue, mode="group", seat_count=3)
        make_reservation(venue, mon(9), mon(9, 15), table=booth)

        result = get_date_availability(db_session, venue_id=venue.id, day=date(2024, 3, 4))
        assert result.slots[0].available_seats == 0
        assert result.slots[0].is_fully_booked

    def test_closed_day(self, db_session, weekday_venue, make_table):
        make_table(weekday_venue, seats=[("A", 1, 10.0)])
        result = get_date_availability(db_session, venue_id=weekday_venue.id, day=date(2024, 3, 3))
        assert result.slots == []
        assert result.error is None

    def test_no_seats(self, db_session, weekday_venue):
        result = get_date_availability(db_session, venue_id=weekday_venue.id, day=date(2024, 3, 4))
        assert result.capacity == 0
        assert result.error == "This venue has no seats configured."


# =============================================================================
# Availability label
# =============================================================================


def _status(is_open, next_open_at=None):
    kind = OpenStatusKind.OPEN_NOW if is_open else OpenStatusKind.CLOSED_NOW
    return OpenStatus(is_open=is_open, status=kind, today_label="Mon", today_hours_text="", next_open_at=next_open_at)


def _z(day, hour):
    return datetime(2024, 3, day, hour, tzinfo=timezone.utc)


@pytest.mark.unit
class TestAvailabilityLabel:
    def test_no_capacity(self):
        assert compute_availability_label(0, [], _status(True), now=mon(12), timezone="UTC") == "Sold out for now"

    def test_no_status(self):
        assert compute_availability_label(2, [], None, now=mon(12), timezone="UTC") == "Currently Closed"

    def test_opens_later_today(self):
        label = compute_availability_label(2, [], _status(False, mon(9)), now=mon(7), timezone="UTC")
        assert label == "Opens at 9:00 AM"

    def test_opens_tomorrow(self):
        label = compute_availability_label(2, [], _status(False, _z(5, 9)), now=mon(18), timezone="UTC")
        assert label == "Opens tomorrow at 9:00 AM"

    def test_opens_later_in_week(self):
        label = compute_availability_label(2, [], _status(False, _z(6, 9)), now=mon(18), timezone="UTC")
        assert label == "Opens Wednesday at 9:00 AM"

    def test_available_now(self):
        assert compute_availability_label(2, [], _status(True), now=mon(12), timezone="UTC") == "Available now"

    def test_next_availability(self):
        bookings = [BookingInterval(id="r", start_at=mon(12), end_at=mon(13), seat_id="a", seat_count=1)]
        label = compute_availability_label(1, bookings, _status(True), now=mon(12), timezone="UTC")
        assert label == "Next availability @ 1:00 PM"
