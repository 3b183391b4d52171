from __future__ import annotations

from enum import Enum


class HoursSource(str, Enum):
    MANUAL = "manual"
    IMPORTED = "imported"


class VenueStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    DELETED = "deleted"


class BookingMode(str, Enum):
    INDIVIDUAL = "individual"
    GROUP = "group"


class ReservationStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class OpenStatusKind(str, Enum):
    OPEN_NOW = "OPEN_NOW"
    CLOSED_NOW = "CLOSED_NOW"
    OPENS_LATER = "OPENS_LATER"
    CLOSED_TODAY = "CLOSED_TODAY"


class BlockDuration(str, Enum):
    ONE_HOUR = "one_hour"
    TODAY = "today"
    CUSTOM = "custom"
