from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from seatbook.core.config import get_settings
from seatbook.domain.intervals import HasWindow
from seatbook.services.time_utils import ceil_to_slot, next_slot_boundary


def estimate_next_available(
    conflicts: Iterable[HasWindow],
    requested_start: datetime,
    *,
    now: datetime | None = None,
    slot_minutes: int | None = None,
) -> datetime | None:
    """Slot boundary at which the latest conflict has cleared, if after ``requested_start``.

    Off-grid ends round up to the next boundary. An end already on the grid
    is kept only when it is still ahead of ``now``; otherwise (or when no
    clock is given) it advances one full slot. The estimate never falls
    before ``now`` rounded up to the grid.
    """
    ends = [c.end_at for c in conflicts]
    if not ends:
        return None
    slot_minutes = slot_minutes or get_settings().slot_minutes
    latest = max(ends)
    if now is not None and latest > now and ceil_to_slot(latest, slot_minutes) == latest:
        rounded = latest
    else:
        rounded = next_slot_boundary(latest, slot_minutes)
    if now is not None:
        rounded = max(rounded, ceil_to_slot(now, slot_minutes))
    return rounded if rounded > requested_start else None
