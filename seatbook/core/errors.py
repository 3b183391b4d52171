from __future__ import annotations

from enum import Enum
from typing import NoReturn

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    PAST_TIME = "PAST_TIME"
    INVALID_RANGE = "INVALID_RANGE"
    OUTSIDE_HOURS = "OUTSIDE_HOURS"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    VENUE_NOT_FOUND = "VENUE_NOT_FOUND"
    VENUE_PAUSED = "VENUE_PAUSED"
    VENUE_DELETED = "VENUE_DELETED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_DISABLED = "RESOURCE_DISABLED"
    INVALID_RESOURCE = "INVALID_RESOURCE"
    CONFLICT = "CONFLICT"


_STATUS_BY_CODE = {
    ErrorCode.PAST_TIME: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_RANGE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.OUTSIDE_HOURS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VENUE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VENUE_PAUSED: status.HTTP_403_FORBIDDEN,
    ErrorCode.VENUE_DELETED: status.HTTP_403_FORBIDDEN,
    ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RESOURCE_DISABLED: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_RESOURCE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
}


def booking_error(code: ErrorCode, message: str) -> HTTPException:
    """Build an HTTPException whose detail carries a machine-readable code."""
    return HTTPException(status_code=_STATUS_BY_CODE[code], detail={"code": code.value, "message": message})


def raise_booking_error(code: ErrorCode, message: str) -> NoReturn:
    raise booking_error(code, message)
