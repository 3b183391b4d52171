from __future__ import annotations

import logging
from datetime import datetime, timedelta

from fastapi import HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from seatbook.core.config import get_settings
from seatbook.domain.enums import BlockDuration
from seatbook.models.seat import Seat
from seatbook.models.seat_block import SeatBlock
from seatbook.models.table import VenueTable
from seatbook.models.venue import Venue
from seatbook.services.audit_service import write_audit_log
from seatbook.services.time_utils import get_zone, local_day_bounds

logger = logging.getLogger(__name__)


def resolve_block_window(
    *,
    duration: BlockDuration,
    now: datetime,
    timezone: str | None,
    start_at: datetime | None = None,
    end_at: datetime | None = None,
) -> tuple[datetime, datetime]:
    if duration == BlockDuration.ONE_HOUR:
        return now, now + timedelta(hours=1)
    if duration == BlockDuration.TODAY:
        tz = get_zone(timezone, get_settings().default_timezone)
        _, day_end = local_day_bounds(now.astimezone(tz).date(), tz)
        return now, day_end
    if start_at is None or end_at is None:
        raise HTTPException(status_code=400, detail="start_at and end_at are required for a custom block")
    if start_at >= end_at:
        raise HTTPException(status_code=400, detail="Invalid time range")
    return start_at, end_at


def create_seat_block(
    db: Session,
    *,
    venue: Venue,
    seat_id: str | None,
    duration: BlockDuration,
    now: datetime,
    start_at: datetime | None = None,
    end_at: datetime | None = None,
    reason: str = "",
    actor_id: str | None = None,
    request: Request | None = None,
) -> SeatBlock:
    if seat_id is not None:
        seat = db.execute(
            select(Seat).join(VenueTable, Seat.table_id == VenueTable.id).where(Seat.id == seat_id, VenueTable.venue_id == venue.id)
        ).scalar_one_or_none()
        if seat is None:
            raise HTTPException(status_code=404, detail="Seat not found for this venue")

    block_start, block_end = resolve_block_window(duration=duration, now=now, timezone=venue.timezone, start_at=start_at, end_at=end_at)
    block = SeatBlock(venue_id=venue.id, seat_id=seat_id, start_at=block_start, end_at=block_end, reason=reason, created_by=actor_id)
    db.add(block)
    db.commit()
    db.refresh(block)

    logger.info("Seat block %s created (venue=%s seat=%s)", block.id, venue.id, seat_id or "*")
    write_audit_log(
        db,
        venue_id=venue.id,
        actor_id=actor_id,
        action_type="SEAT_BLOCK_CREATE",
        target_type="seat_block",
        target_id=block.id,
        summary="Created venue-wide block" if seat_id is None else "Created seat block",
        diff_json={"seat_id": seat_id, "start_at": block_start, "end_at": block_end, "duration": duration.value, "reason": reason},
        request=request,
    )
    return block


def list_seat_blocks(db: Session, *, venue_id: str, start_at: datetime | None = None, end_at: datetime | None = None) -> list[SeatBlock]:
    q = select(SeatBlock).where(SeatBlock.venue_id == venue_id).order_by(SeatBlock.start_at)
    if end_at is not None:
        q = q.where(SeatBlock.start_at < end_at)
    if start_at is not None:
        q = q.where(SeatBlock.end_at > start_at)
    return list(db.execute(q.limit(1000)).scalars().all())


def delete_seat_block(db: Session, *, venue_id: str, block_id: str, actor_id: str | None = None, request: Request | None = None) -> None:
    block = db.get(SeatBlock, block_id)
    if not block or block.venue_id != venue_id:
        raise HTTPException(status_code=404, detail="Not found")
    db.delete(block)
    db.commit()

    logger.info("Seat block %s deleted", block_id)
    write_audit_log(
        db,
        venue_id=venue_id,
        actor_id=actor_id,
        action_type="SEAT_BLOCK_DELETE",
        target_type="seat_block",
        target_id=block_id,
        summary="Deleted seat block",
        request=request,
    )
