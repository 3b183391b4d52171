from __future__ import annotations

from dataclasses import dataclass

from seatbook.core.errors import ErrorCode, raise_booking_error
from seatbook.domain.enums import VenueStatus
from seatbook.models.venue import Venue

DEFAULT_PAUSE_MESSAGE = "This venue is temporarily not accepting reservations."
DELETED_MESSAGE = "This venue is no longer available."


@dataclass(frozen=True)
class Bookability:
    can_book: bool
    status: VenueStatus
    pause_message: str | None = None


def get_venue_bookability(venue: Venue) -> Bookability:
    try:
        status = VenueStatus(venue.status or VenueStatus.ACTIVE.value)
    except ValueError:
        status = VenueStatus.ACTIVE
    if status == VenueStatus.DELETED:
        return Bookability(can_book=False, status=status, pause_message=DELETED_MESSAGE)
    if status == VenueStatus.PAUSED:
        return Bookability(can_book=False, status=status, pause_message=venue.pause_message or DEFAULT_PAUSE_MESSAGE)
    return Bookability(can_book=True, status=status)


def ensure_bookable(venue: Venue) -> None:
    bookability = get_venue_bookability(venue)
    if bookability.can_book:
        return
    code = ErrorCode.VENUE_DELETED if bookability.status == VenueStatus.DELETED else ErrorCode.VENUE_PAUSED
    raise_booking_error(code, bookability.pause_message or DEFAULT_PAUSE_MESSAGE)
