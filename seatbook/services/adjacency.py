from __future__ import annotations

from collections.abc import Iterable

from seatbook.domain.types import SeatInfo


def find_adjacent_run(seats: Iterable[SeatInfo], count: int) -> list[SeatInfo] | None:
    """Lowest-positioned run of ``count`` seats with consecutive positions.

    Seats without a position never take part. Duplicate positions break a run.
    """
    if count < 1:
        return None
    ordered = sorted((s for s in seats if s.position is not None), key=lambda s: (s.position, s.id))
    for i in range(len(ordered) - count + 1):
        window = ordered[i : i + count]
        if all(window[j + 1].position == window[j].position + 1 for j in range(count - 1)):
            return window
    return None
