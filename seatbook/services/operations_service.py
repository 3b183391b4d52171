"""Helpers behind the operator console: what is happening at a venue right now."""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from seatbook.domain.enums import ReservationStatus
from seatbook.domain.intervals import contains
from seatbook.domain.types import BlockInterval
from seatbook.models.reservation import Reservation
from seatbook.models.seat_block import SeatBlock


def reservation_phase(reservation: Reservation, now: datetime) -> str:
    """One of ``now``, ``upcoming``, ``past`` or ``cancelled``."""
    if reservation.status == ReservationStatus.CANCELLED.value:
        return "cancelled"
    if contains(reservation, now):
        return "now"
    if reservation.start_at > now:
        return "upcoming"
    return "past"


def is_seat_blocked(seat_id: str, blocks: Iterable[SeatBlock | BlockInterval], now: datetime) -> bool:
    # Venue-wide blocks (seat_id None) hold every seat
    return any(b.seat_id in (seat_id, None) and contains(b, now) for b in blocks)
