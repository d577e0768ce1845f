# fitstudy/services/booking/__init__.py
from .booking_service import BookingService, booking_service
from .errors import BookingRejected

__all__ = [
    "BookingService",
    "BookingRejected",
    "booking_service",
]
