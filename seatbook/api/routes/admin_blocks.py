from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from seatbook.core.deps import get_actor_id, get_db, get_now
from seatbook.schemas.seat_block import SeatBlockCreate, SeatBlockOut
from seatbook.services.seat_block_service import create_seat_block, delete_seat_block, list_seat_blocks
from seatbook.services.time_utils import ensure_aware
from seatbook.services.venue_service import get_venue_or_404

router = APIRouter()


@router.get("/{venue_id}/seat-blocks", response_model=list[SeatBlockOut])
def list_blocks(
    venue_id: str,
    from_: datetime | None = Query(default=None, alias="from"),
    to: datetime | None = None,
    db: Session = Depends(get_db),
):
    get_venue_or_404(db, venue_id)
    return list_seat_blocks(
        db,
        venue_id=venue_id,
        start_at=ensure_aware(from_) if from_ else None,
        end_at=ensure_aware(to) if to else None,
    )


@router.post("/{venue_id}/seat-blocks", response_model=SeatBlockOut, status_code=201)
def create_block(
    venue_id: str,
    payload: SeatBlockCreate,
    request: Request,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    actor_id: str | None = Depends(get_actor_id),
):
    venue = get_venue_or_404(db, venue_id)
    return create_seat_block(
        db,
        venue=venue,
        seat_id=payload.seat_id,
        duration=payload.duration,
        now=now,
        start_at=ensure_aware(payload.start_at) if payload.start_at else None,
        end_at=ensure_aware(payload.end_at) if payload.end_at else None,
        reason=payload.reason,
        actor_id=actor_id,
        request=request,
    )


@router.delete("/{venue_id}/seat-blocks/{block_id}")
def delete_block(
    venue_id: str,
    block_id: str,
    request: Request,
    db: Session = Depends(get_db),
    actor_id: str | None = Depends(get_actor_id),
):
    delete_seat_block(db, venue_id=venue_id, block_id=block_id, actor_id=actor_id, request=request)
    return {"ok": True}
