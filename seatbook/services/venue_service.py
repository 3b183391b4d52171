from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from seatbook.domain.enums import BookingMode, VenueStatus
from seatbook.domain.types import GroupTable, IndividualTable, Inventory, SeatInfo, Table
from seatbook.models.table import VenueTable
from seatbook.models.venue import Venue
from seatbook.services.audit_service import write_audit_log

logger = logging.getLogger(__name__)


def normalize_string_list(value: Any) -> list[str]:
    """Coerce a stored tag/image list into ``list[str]``.

    Accepts a list, a JSON-encoded list, a comma separated string or null.
    """
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except ValueError:
                decoded = None
            if isinstance(decoded, list):
                return normalize_string_list(decoded)
        return [part.strip() for part in text.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return []


def get_venue_or_404(db: Session, venue_id: str) -> Venue:
    venue = db.get(Venue, venue_id)
    if not venue:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


def to_table(table: VenueTable) -> Table:
    images = tuple(normalize_string_list(table.image_urls))
    if table.booking_mode == BookingMode.GROUP.value:
        return GroupTable(
            id=table.id,
            name=table.name,
            seat_count=table.seat_count or len(table.seats),
            price_per_hour=table.table_price_per_hour,
            is_active=table.is_active,
            image_urls=images,
        )
    seats = tuple(
        SeatInfo(
            id=s.id,
            table_id=table.id,
            label=s.label,
            position=s.position,
            price_per_hour=s.price_per_hour,
            is_active=s.is_active,
            tags=tuple(normalize_string_list(s.tags)),
            image_urls=tuple(normalize_string_list(s.image_urls)),
        )
        for s in table.seats
    )
    return IndividualTable(id=table.id, name=table.name, seats=seats, is_active=table.is_active, image_urls=images)


def load_inventory(db: Session, venue_id: str) -> Inventory:
    tables = db.execute(
        select(VenueTable)
        .options(selectinload(VenueTable.seats))
        .where(VenueTable.venue_id == venue_id)
        .order_by(VenueTable.name, VenueTable.id)
    ).scalars().all()
    return Inventory(tables=tuple(to_table(t) for t in tables))


def set_venue_status(
    db: Session,
    *,
    venue: Venue,
    status: VenueStatus,
    pause_message: str | None = None,
    actor_id: str | None = None,
    request: Request | None = None,
) -> Venue:
    previous = venue.status
    venue.status = status.value
    venue.pause_message = (pause_message or None) if status == VenueStatus.PAUSED else None
    db.commit()
    db.refresh(venue)

    logger.info("Venue %s status %s -> %s", venue.id, previous, venue.status)
    write_audit_log(
        db,
        venue_id=venue.id,
        actor_id=actor_id,
        action_type="VENUE_STATUS",
        target_type="venue",
        target_id=venue.id,
        summary=f"Venue status {previous} -> {venue.status}",
        diff_json={"from": previous, "to": venue.status, "pause_message": venue.pause_message},
        request=request,
    )
    return venue
