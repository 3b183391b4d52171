"""Value types consumed by the availability engine.

ORM rows are converted into these at the data-access boundary so the engine
works on plain, immutable data and never touches the session.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from seatbook.domain.enums import HoursSource


@dataclass(frozen=True)
class HoursRow:
    day_of_week: int  # 0 = Sunday .. 6 = Saturday
    is_closed: bool
    open_time: str | None = None
    close_time: str | None = None
    source: HoursSource = HoursSource.IMPORTED


@dataclass(frozen=True)
class CanonicalHours:
    timezone: str
    weekly_hours: tuple[HoursRow, ...] = ()

    def row_for(self, day_of_week: int) -> HoursRow | None:
        for row in self.weekly_hours:
            if row.day_of_week == day_of_week:
                return row
        return None


@dataclass(frozen=True)
class SeatInfo:
    id: str
    table_id: str
    label: str
    position: int | None
    price_per_hour: float
    is_active: bool = True
    tags: tuple[str, ...] = ()
    image_urls: tuple[str, ...] = ()


@dataclass(frozen=True)
class IndividualTable:
    id: str
    name: str
    seats: tuple[SeatInfo, ...]
    is_active: bool = True
    image_urls: tuple[str, ...] = ()

    @property
    def active_seats(self) -> tuple[SeatInfo, ...]:
        return tuple(s for s in self.seats if s.is_active)


@dataclass(frozen=True)
class GroupTable:
    id: str
    name: str
    seat_count: int
    price_per_hour: float | None
    is_active: bool = True
    image_urls: tuple[str, ...] = ()


Table = IndividualTable | GroupTable


@dataclass(frozen=True)
class BookingInterval:
    """A non-cancelled reservation as seen by the engine."""

    id: str
    start_at: datetime
    end_at: datetime
    seat_id: str | None = None
    table_id: str | None = None
    seat_count: int = 1

    @property
    def is_group(self) -> bool:
        return self.seat_id is None and self.table_id is not None


@dataclass(frozen=True)
class BlockInterval:
    id: str
    start_at: datetime
    end_at: datetime
    seat_id: str | None = None

    @property
    def is_venue_wide(self) -> bool:
        return self.seat_id is None


@dataclass(frozen=True)
class Inventory:
    tables: tuple[Table, ...] = field(default_factory=tuple)

    @property
    def individual_tables(self) -> list[IndividualTable]:
        return [t for t in self.tables if isinstance(t, IndividualTable) and t.is_active]

    @property
    def group_tables(self) -> list[GroupTable]:
        return [t for t in self.tables if isinstance(t, GroupTable) and t.is_active]

    def total_capacity(self) -> int:
        individual = sum(len(t.active_seats) for t in self.individual_tables)
        group = sum(t.seat_count for t in self.group_tables)
        return individual + group
