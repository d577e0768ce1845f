# fitstudy/schemas/booking.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class BookingErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    UNAUTHENTICATED = "unauthenticated"
    UNAUTHORIZED = "unauthorized"
    ALREADY_BOOKED = "already_booked"
    NOT_FOUND = "not_found"
    EVENT_IN_PAST = "event_in_past"
    CATEGORY_CONFLICT = "category_conflict"
    EVENT_FULL = "event_full"
    INTERNAL = "internal"
    # The store timed out; nothing was committed and the call can be retried.
    UNKNOWN = "unknown"


class CancelErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    CANCELLATION_WINDOW_CLOSED = "cancellation_window_closed"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


class BookingResult(BaseModel):
    success: bool
    booking_id: Optional[str] = None
    error_kind: Optional[BookingErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, booking_id: str) -> "BookingResult":
        return cls(success=True, booking_id=booking_id)

    @classmethod
    def fail(cls, error_kind: BookingErrorKind, message: str) -> "BookingResult":
        return cls(success=False, error_kind=error_kind, message=message)


class CancelResult(BaseModel):
    success: bool
    booking_id: Optional[str] = None
    error_kind: Optional[CancelErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, booking_id: str) -> "CancelResult":
        return cls(success=True, booking_id=booking_id)

    @classmethod
    def fail(cls, error_kind: CancelErrorKind, message: str) -> "CancelResult":
        return cls(success=False, error_kind=error_kind, message=message)
