from __future__ import annotations

from datetime import datetime
from typing import Protocol


class HasWindow(Protocol):
    start_at: datetime
    end_at: datetime


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap: [a_start, a_end) and [b_start, b_end)."""
    return a_start < b_end and a_end > b_start


def window_overlaps(item: HasWindow, start_at: datetime, end_at: datetime) -> bool:
    return overlaps(item.start_at, item.end_at, start_at, end_at)


def contains(item: HasWindow, at: datetime) -> bool:
    return item.start_at <= at < item.end_at
