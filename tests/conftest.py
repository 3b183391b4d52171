"""Pytest configuration and fixtures for the seatbook tests."""
from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from seatbook.core.deps import get_db, get_now
from seatbook.db.base import Base
from seatbook.models import Reservation, Seat, SeatBlock, Venue, VenueHours, VenueTable

# Monday
MONDAY = date(2024, 3, 4)


def utc(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def mon(hour: int, minute: int = 0) -> datetime:
    return utc(MONDAY, hour, minute)


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite shared across connections of one test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    SessionLocal = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def fixed_now():
    """Monday 2024-03-04 08:00 UTC, before any of the test windows."""
    return mon(8)


@pytest.fixture(scope="function")
def make_venue(db_session):
    """Factory: venue with optional weekly hours ``{day_of_week: (open, close)}``."""

    def _create(hours=None, *, timezone="UTC", hours_source=None, source="imported", status="active", **kwargs):
        venue = Venue(name=kwargs.pop("name", "Test Venue"), timezone=timezone, hours_source=hours_source, status=status, **kwargs)
        db_session.add(venue)
        db_session.flush()
        for dow, span in (hours or {}).items():
            if span is None:
                db_session.add(VenueHours(venue_id=venue.id, day_of_week=dow, is_closed=True, source=source))
            else:
                db_session.add(VenueHours(venue_id=venue.id, day_of_week=dow, is_closed=False, open_time=span[0], close_time=span[1], source=source))
        db_session.commit()
        return venue

    return _create


@pytest.fixture(scope="function")
def make_table(db_session):
    """Factory: individual table from ``seats=[(label, position, price), ...]`` or a group table."""

    def _create(venue, *, name="T1", mode="individual", seats=(), seat_count=None, price=None, is_active=True):
        table = VenueTable(
            venue_id=venue.id,
            name=name,
            booking_mode=mode,
            seat_count=seat_count if seat_count is not None else len(seats),
            table_price_per_hour=price,
            is_active=is_active,
        )
        db_session.add(table)
        db_session.flush()
        for seat_def in seats:
            label, position, seat_price = seat_def[:3]
            active = seat_def[3] if len(seat_def) > 3 else True
            db_session.add(Seat(table_id=table.id, label=label, position=position, price_per_hour=seat_price, is_active=active))
        db_session.commit()
        db_session.refresh(table)
        return table

    return _create


@pytest.fixture(scope="function")
def make_reservation(db_session):
    def _create(venue, start_at, end_at, *, seat=None, table=None, seat_count=None, status="active"):
        r = Reservation(
            venue_id=venue.id,
            seat_id=seat.id if seat is not None else None,
            table_id=table.id if table is not None else (seat.table_id if seat is not None else None),
            start_at=start_at,
            end_at=end_at,
            seat_count=seat_count or (1 if seat is not None else (table.seat_count if table is not None else 1)),
            status=status,
        )
        db_session.add(r)
        db_session.commit()
        return r

    return _create


@pytest.fixture(scope="function")
def make_block(db_session):
    def _create(venue, start_at, end_at, *, seat=None, reason=""):
        b = SeatBlock(venue_id=venue.id, seat_id=seat.id if seat is not None else None, start_at=start_at, end_at=end_at, reason=reason)
        db_session.add(b)
        db_session.commit()
        return b

    return _create


@pytest.fixture(scope="function")
def weekday_venue(make_venue):
    """Venue in UTC open Monday to Friday 09:00-17:00."""
    return make_venue({d: ("09:00", "17:00") for d in range(1, 6)})


@pytest.fixture(scope="function")
def client(db_session, fixed_now):
    from seatbook.main import app

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_now] = lambda: fixed_now
    yield TestClient(app)
    app.dependency_overrides.clear()
