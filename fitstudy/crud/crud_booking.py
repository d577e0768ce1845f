# fitstudy/crud/crud_booking.py
"""
CRUD operations for bookings.

The locking reads and the capacity-conditioned insert are meant to be used
inside a single transactional unit (see fitstudy.db.unit_of_work); none of
the write helpers here commit on their own.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import String, and_, func, insert, literal, select, text
from sqlalchemy.orm import Session

from fitstudy.constants.booking import BookingStatus
from fitstudy.constants.event_category import EventCategory
from fitstudy.models.booking import Booking
from fitstudy.models.event import Event
from fitstudy.utils.time import ensure_utc

logger = logging.getLogger(__name__)


class CRUDBooking:
    """CRUD operations for Booking."""

    def get(self, db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    def lock_confirmed_booking(
        self,
        db: Session,
        *,
        user_id: str,
        event_id: str,
    ) -> Optional[Booking]:
        """Get a user's confirmed booking for an event, locking the row."""
        return db.query(Booking).filter(
            and_(
                Booking.user_id == user_id,
                Booking.event_id == event_id,
                Booking.status == BookingStatus.CONFIRMED,
            )
        ).with_for_update().first()

    def lock_owned_confirmed_booking(
        self,
        db: Session,
        *,
        booking_id: str,
        user_id: str,
    ) -> Optional[Booking]:
        """Get a confirmed booking by id only if it belongs to user_id, locking the row."""
        return db.query(Booking).filter(
            and_(
                Booking.id == booking_id,
                Booking.user_id == user_id,
                Booking.status == BookingStatus.CONFIRMED,
            )
        ).with_for_update().first()

    def count_confirmed(self, db: Session, *, event_id: str) -> int:
        """Count confirmed bookings for an event."""
        return db.query(func.count(Booking.id)).filter(
            and_(
                Booking.event_id == event_id,
                Booking.status == BookingStatus.CONFIRMED,
            )
        ).scalar() or 0

    def insert_confirmed_if_under_capacity(
        self,
        db: Session,
        *,
        user_id: str,
        event_id: str,
        capacity: int,
    ) -> Optional[Booking]:
        """
        Insert a confirmed booking only while the event still has room.

        The live count is re-derived inside the INSERT ... SELECT itself, so
        the check and the write are one statement. Returns None when no row
        was inserted because the event is full.
        """
        booking_id = f"bkg_{uuid.uuid4().hex[:12]}"
        bookings = Booking.__table__

        live_count = (
            select(func.count(bookings.c.id))
            .where(
                and_(
                    bookings.c.event_id == event_id,
                    bookings.c.status == BookingStatus.CONFIRMED,
                )
            )
            .scalar_subquery()
        )
        source = select(
            literal(booking_id, String),
            literal(user_id, String),
            literal(event_id, String),
            literal(BookingStatus.CONFIRMED, String),
        ).where(live_count < capacity)

        result = db.execute(
            insert(bookings).from_select(["id", "user_id", "event_id", "status"], source)
        )
        if result.rowcount == 0:
            logger.info(
                f"Booking rejected for user {user_id} - event {event_id} at capacity ({capacity})"
            )
            return None

        return db.get(Booking, booking_id)

    def lock_user_category(
        self,
        db: Session,
        *,
        user_id: str,
        category: EventCategory,
    ) -> None:
        """
        Serialise single-active bookings of one user in one category.

        The category lookup can only lock booking rows that already exist, so
        on PostgreSQL a transaction-scoped advisory lock keyed on the user and
        category is taken first. SQLite write units already hold the database
        write lock.
        """
        if db.get_bind().dialect.name != "postgresql":
            return
        db.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:lock_key))"),
            {"lock_key": f"{user_id}:{EventCategory(category).value}"},
        )

    def find_active_single_category_booking(
        self,
        db: Session,
        *,
        user_id: str,
        category: EventCategory,
        not_before: datetime,
    ) -> Optional[Booking]:
        """
        Find a confirmed booking of this user on an event of the given
        category starting at or after not_before, locking the rows read.
        """
        return (
            db.query(Booking)
            .join(Event, Booking.event_id == Event.id)
            .filter(
                and_(
                    Booking.user_id == user_id,
                    Booking.status == BookingStatus.CONFIRMED,
                    Event.category == category,
                    Event.start_time >= ensure_utc(not_before),
                )
            )
            .order_by(Event.start_time.asc(), Event.id.asc())
            .with_for_update()
            .first()
        )

    def mark_cancelled(
        self,
        db: Session,
        *,
        booking: Booking,
        cancelled_at: datetime,
    ) -> Booking:
        """Move a confirmed booking to cancelled. The caller commits."""
        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = ensure_utc(cancelled_at)
        db.flush()
        return booking

    def get_user_bookings(
        self,
        db: Session,
        *,
        user_id: str,
        status: Optional[str] = BookingStatus.CONFIRMED,
    ) -> List[Booking]:
        """Get a user's bookings ordered by event start, optionally filtered by status."""
        query = (
            db.query(Booking)
            .join(Event, Booking.event_id == Event.id)
            .filter(Booking.user_id == user_id)
        )
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Event.start_time.asc(), Event.id.asc()).all()

    def get_confirmed_with_events(self, db: Session, *, user_id: str) -> list:
        """Rows of (event_id, category, start_time) for every confirmed booking of a user."""
        return (
            db.query(Event.id, Event.category, Event.start_time)
            .join(Booking, Booking.event_id == Event.id)
            .filter(
                and_(
                    Booking.user_id == user_id,
                    Booking.status == BookingStatus.CONFIRMED,
                )
            )
            .all()
        )

    def available_spots(self, db: Session, *, event: Event) -> int:
        """Calculate number of available spots."""
        return max(0, event.capacity - self.count_confirmed(db, event_id=event.id))


# Singleton instance
booking = CRUDBooking()
