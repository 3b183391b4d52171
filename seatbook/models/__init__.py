# Import all models so that SQLAlchemy registers them for metadata.create_all
from seatbook.models.venue import Venue
from seatbook.models.venue_hours import VenueHours
from seatbook.models.table import VenueTable
from seatbook.models.seat import Seat
from seatbook.models.reservation import Reservation
from seatbook.models.seat_block import SeatBlock
from seatbook.models.audit_log import AuditLog

__all__ = [
    "Venue",
    "VenueHours",
    "VenueTable",
    "Seat",
    "Reservation",
    "SeatBlock",
    "AuditLog",
]
