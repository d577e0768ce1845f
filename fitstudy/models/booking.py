# fitstudy/models/booking.py
"""
Booking model linking a participant to a study event.

Cancelled bookings are kept; only confirmed ones occupy capacity. The
partial unique index allows re-booking after a cancellation while still
rejecting a second confirmed booking for the same event.
"""

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from fitstudy.constants.booking import BookingStatus
from fitstudy.db.base_class import Base

_STATUS_VALUES = ", ".join(f"'{s}'" for s in BookingStatus.all_values())


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String, primary_key=True, default=lambda: f"bkg_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False, index=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, server_default=BookingStatus.CONFIRMED)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    event = relationship("Event", back_populates="bookings")

    __table_args__ = (
        Index(
            "uq_bookings_event_user_confirmed",
            "event_id",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'confirmed'"),
            sqlite_where=text("status = 'confirmed'"),
        ),
        CheckConstraint(
            f"status IN ({_STATUS_VALUES})", name="check_booking_status"
        ),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_id}, event={self.event_id}, status={self.status})>"
