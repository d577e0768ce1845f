# fitstudy/constants/booking.py
"""
Constants for booking status values.

Bookings only ever move from CONFIRMED to CANCELLED.
"""


class BookingStatus:
    """Booking status values."""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    @classmethod
    def all_values(cls) -> list[str]:
        """Return all valid status values."""
        return [cls.CONFIRMED, cls.CANCELLED]