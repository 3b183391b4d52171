"""Tests for manual schedules and imported hours sync."""
import pytest
from fastapi import HTTPException
from sqlalchemy import select

from seatbook.domain.enums import HoursSource
from seatbook.domain.types import HoursRow
from seatbook.models import AuditLog, VenueHours
from seatbook.services.hours_config_service import (
    parse_imported_periods,
    set_manual_hours,
    switch_to_imported,
    sync_imported_hours,
)
from seatbook.services.hours_service import get_canonical_hours


def manual_week(**overrides):
    rows = []
    for d in range(7):
        span = overrides.get(f"d{d}", ("10:00", "18:00"))
        if span is None:
            rows.append(HoursRow(day_of_week=d, is_closed=True, source=HoursSource.MANUAL))
        else:
            rows.append(HoursRow(day_of_week=d, is_closed=False, open_time=span[0], close_time=span[1], source=HoursSource.MANUAL))
    return rows


def period(open_day, open_hour, close_day=None, close_hour=None, open_minute=0, close_minute=0):
    p = {"open": {"day": open_day, "hour": open_hour, "minute": open_minute}}
    if close_day is not None:
        p["close"] = {"day": close_day, "hour": close_hour, "minute": close_minute}
    return p


def stored(db, venue_id):
    rows = db.execute(select(VenueHours).where(VenueHours.venue_id == venue_id)).scalars().all()
    return {r.day_of_week: r for r in rows}


# =============================================================================
# Imported period parsing
# =============================================================================


@pytest.mark.unit
class TestParseImportedPeriods:
    def test_simple_day(self):
        rows = parse_imported_periods([period(1, 9, 1, 17)])
        assert len(rows) == 7
        assert (rows[1].open_time, rows[1].close_time, rows[1].is_closed) == ("09:00", "17:00", False)
        assert rows[0].is_closed and rows[2].is_closed

    def test_overnight_period_is_split(self):
        rows = parse_imported_periods([period(5, 20, 6, 2, close_minute=30)])
        assert (rows[5].open_time, rows[5].close_time) == ("20:00", "23:59")
        assert (rows[6].open_time, rows[6].close_time) == ("00:00", "02:30")

    def test_saturday_into_sunday(self):
        rows = parse_imported_periods([period(6, 22, 0, 1)])
        assert rows[6].close_time == "23:59"
        assert (rows[0].open_time, rows[0].close_time) == ("00:00", "01:00")

    def test_period_ending_at_midnight(self):
        rows = parse_imported_periods([period(1, 18, 2, 0)])
        assert rows[1].close_time == "23:59"
        assert rows[2].is_closed

    def test_missing_close_means_end_of_day(self):
        rows = parse_imported_periods([period(3, 8)])
        assert (rows[3].open_time, rows[3].close_time) == ("08:00", "23:59")

    def test_split_shifts_widen_to_envelope(self):
        rows = parse_imported_periods([period(2, 14, 2, 22), period(2, 8, 2, 11, close_minute=30)])
        assert (rows[2].open_time, rows[2].close_time) == ("08:00", "22:00")

    def test_empty_and_malformed(self):
        assert all(r.is_closed for r in parse_imported_periods(None))
        assert all(r.is_closed for r in parse_imported_periods([{"close": {"day": 1, "hour": 2}}]))


# =============================================================================
# Writes
# =============================================================================


@pytest.mark.integration
class TestSetManualHours:
    def test_replaces_schedule_and_switches_source(self, db_session, weekday_venue):
        set_manual_hours(db_session, venue=weekday_venue, days=manual_week(d0=None), actor_id="op-1")

        rows = stored(db_session, weekday_venue.id)
        assert len(rows) == 7
        assert all(r.source == "manual" for r in rows.values())
        assert rows[0].is_closed
        assert rows[1].open_time == "10:00"
        assert weekday_venue.hours_source == "manual"

        log = db_session.execute(select(AuditLog).where(AuditLog.action_type == "HOURS_MANUAL_SET")).scalar_one()
        assert log.actor_id == "op-1"
        assert log.target_id == weekday_venue.id

    def test_requires_full_week(self, db_session, weekday_venue):
        with pytest.raises(HTTPException) as exc:
            set_manual_hours(db_session, venue=weekday_venue, days=manual_week()[:6])
        assert exc.value.status_code == 400

    @pytest.mark.parametrize("span", [("18:00", "10:00"), ("10am", "18:00")])
    def test_rejects_invalid_day(self, db_session, weekday_venue, span):
        with pytest.raises(HTTPException) as exc:
            set_manual_hours(db_session, venue=weekday_venue, days=manual_week(d3=span))
        assert "Wed" in exc.value.detail
        assert stored(db_session, weekday_venue.id)[3].open_time == "09:00"


@pytest.mark.integration
class TestSyncImportedHours:
    def test_upserts_all_days(self, db_session, make_venue):
        venue = make_venue({1: ("09:00", "17:00")})
        written = sync_imported_hours(db_session, venue=venue, rows=parse_imported_periods([period(1, 8, 1, 12), period(2, 9, 2, 10)]))
        assert written == list(range(7))
        rows = stored(db_session, venue.id)
        assert rows[1].open_time == "08:00"
        assert rows[2].close_time == "10:00"
        assert rows[4].is_closed

    def test_keeps_manual_days_on_manual_venue(self, db_session, weekday_venue):
        set_manual_hours(db_session, venue=weekday_venue, days=manual_week())
        written = sync_imported_hours(db_session, venue=weekday_venue, rows=parse_imported_periods([period(1, 6, 1, 8)]))

        assert written == []
        assert stored(db_session, weekday_venue.id)[1].open_time == "10:00"

    def test_switch_to_imported_overwrites_everything(self, db_session, weekday_venue):
        set_manual_hours(db_session, venue=weekday_venue, days=manual_week())
        written = switch_to_imported(db_session, venue=weekday_venue, periods=[period(1, 6, 1, 8)])

        assert written == list(range(7))
        assert weekday_venue.hours_source == "imported"
        db_session.expire_all()
        canonical = get_canonical_hours(db_session, weekday_venue.id)
        assert canonical.row_for(1).open_time == "06:00"
        assert canonical.row_for(2).is_closed
