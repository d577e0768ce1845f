# fitstudy/services/booking/booking_service.py
"""
Booking Service

Handles reservation and cancellation of study event bookings:
- Ordered input, identity and eligibility checks
- Row-locked reads for duplicates, the event and single-active categories
- Capacity-conditioned insert in the same transaction
- 24-hour cancellation cutoff

Every call returns a typed result. Expected conflicts (full event, duplicate
booking, category conflict) are ordinary outcomes, not exceptions.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fitstudy import crud
from fitstudy.constants.event_category import category_label, is_single_active
from fitstudy.core.config import settings
from fitstudy.db.unit_of_work import is_lock_timeout, transactional_unit
from fitstudy.schemas.booking import (
    BookingErrorKind,
    BookingResult,
    CancelErrorKind,
    CancelResult,
)
from fitstudy.services.booking.errors import BookingRejected
from fitstudy.utils.time import ensure_utc, resolve_now

logger = logging.getLogger(__name__)

ALREADY_BOOKED_MESSAGE = "You are already booked for this event"
RETRY_MESSAGE = "The booking system is busy. Please try again."


class BookingService:
    """Service for creating and cancelling bookings."""

    def __init__(
        self,
        *,
        cancellation_cutoff_hours: int = settings.CANCELLATION_CUTOFF_HOURS,
        lock_timeout_ms: Optional[int] = None,
    ):
        self.cancellation_cutoff_hours = cancellation_cutoff_hours
        self.lock_timeout_ms = lock_timeout_ms

    # ========================================
    # Booking creation
    # ========================================

    def create_booking(
        self,
        db: Session,
        *,
        requester_id: Optional[str],
        user_id: Optional[str],
        event_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> BookingResult:
        """
        Reserve one place on an event for user_id.

        Args:
            requester_id: Authenticated caller, None when unauthenticated
            now: Clock reading used for the past-event and category checks

        Returns: BookingResult with the new booking id, or the reason it failed
        """
        if not user_id or not event_id:
            return BookingResult.fail(
                BookingErrorKind.INVALID_INPUT,
                "Invalid input: user_id and event_id are required",
            )
        if requester_id is None:
            return BookingResult.fail(BookingErrorKind.UNAUTHENTICATED, "Not authenticated")
        if requester_id != user_id:
            return BookingResult.fail(
                BookingErrorKind.UNAUTHORIZED,
                "Unauthorized: can only create bookings for yourself",
            )

        now = resolve_now(now)
        try:
            with transactional_unit(db, lock_timeout_ms=self.lock_timeout_ms):
                booking_id = self._reserve(db, user_id=user_id, event_id=event_id, now=now)

        except BookingRejected as rejection:
            return rejection.result

        except IntegrityError:
            # The partial unique index caught a duplicate the locks did not.
            logger.warning(
                f"Duplicate confirmed booking blocked by constraint for user {user_id}, event {event_id}"
            )
            return BookingResult.fail(BookingErrorKind.ALREADY_BOOKED, ALREADY_BOOKED_MESSAGE)

        except Exception as e:
            if is_lock_timeout(e):
                logger.warning(
                    f"Booking for user {user_id}, event {event_id} timed out waiting for a lock"
                )
                return BookingResult.fail(BookingErrorKind.UNKNOWN, RETRY_MESSAGE)
            logger.error(
                f"Failed to create booking for user {user_id}, event {event_id}: {str(e)}",
                exc_info=True,
                extra={"user_id": user_id, "event_id": event_id},
            )
            return BookingResult.fail(
                BookingErrorKind.INTERNAL, "Failed to create booking. Please try again later."
            )

        logger.info(f"Booking {booking_id} created for user {user_id}, event {event_id}")
        return BookingResult.ok(booking_id)

    def _reserve(self, db: Session, *, user_id: str, event_id: str, now: datetime) -> str:
        existing = crud.booking.lock_confirmed_booking(db, user_id=user_id, event_id=event_id)
        if existing is not None:
            raise BookingRejected(
                BookingResult.fail(BookingErrorKind.ALREADY_BOOKED, ALREADY_BOOKED_MESSAGE)
            )

        event = crud.event.lock_and_get(db, event_id=event_id)
        if event is None:
            raise BookingRejected(
                BookingResult.fail(BookingErrorKind.NOT_FOUND, "Event not found")
            )

        if ensure_utc(event.start_time) < now:
            raise BookingRejected(
                BookingResult.fail(BookingErrorKind.EVENT_IN_PAST, "Cannot book past events")
            )

        if is_single_active(event.category):
            crud.booking.lock_user_category(db, user_id=user_id, category=event.category)
            conflict = crud.booking.find_active_single_category_booking(
                db, user_id=user_id, category=event.category, not_before=now
            )
            if conflict is not None:
                logger.info(
                    f"Booking rejected for user {user_id} - already holds {conflict.id} "
                    f"in category {event.category.value}"
                )
                raise BookingRejected(
                    BookingResult.fail(
                        BookingErrorKind.CATEGORY_CONFLICT,
                        f"You already have a confirmed booking for a {category_label(event.category)} "
                        f"event. Please cancel your existing booking first.",
                    )
                )

        booking = crud.booking.insert_confirmed_if_under_capacity(
            db, user_id=user_id, event_id=event_id, capacity=event.capacity
        )
        if booking is None:
            raise BookingRejected(
                BookingResult.fail(BookingErrorKind.EVENT_FULL, "Event is fully booked")
            )
        return booking.id

    # ========================================
    # Cancellation
    # ========================================

    def can_cancel(self, event_start: datetime, now: datetime) -> bool:
        """True while the event starts at least the cutoff number of hours after now."""
        hours_until_start = (ensure_utc(event_start) - ensure_utc(now)).total_seconds() / 3600
        return hours_until_start >= self.cancellation_cutoff_hours

    def cancel_booking(
        self,
        db: Session,
        *,
        requester_id: Optional[str],
        booking_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> CancelResult:
        """Cancel one of the requester's confirmed bookings, subject to the cutoff."""
        if not booking_id:
            return CancelResult.fail(
                CancelErrorKind.INVALID_INPUT, "Invalid input: booking_id is required"
            )
        if requester_id is None:
            return CancelResult.fail(CancelErrorKind.UNAUTHENTICATED, "Not authenticated")

        now = resolve_now(now)
        try:
            with transactional_unit(db, lock_timeout_ms=self.lock_timeout_ms):
                booking = crud.booking.lock_owned_confirmed_booking(
                    db, booking_id=booking_id, user_id=requester_id
                )
                if booking is None:
                    raise BookingRejected(
                        CancelResult.fail(CancelErrorKind.NOT_FOUND, "Booking not found")
                    )

                event = crud.event.get(db, booking.event_id)
                if not self.can_cancel(event.start_time, now):
                    raise BookingRejected(
                        CancelResult.fail(
                            CancelErrorKind.CANCELLATION_WINDOW_CLOSED,
                            f"Cancellations must be made at least "
                            f"{self.cancellation_cutoff_hours} hours before the event",
                        )
                    )

                crud.booking.mark_cancelled(db, booking=booking, cancelled_at=now)

        except BookingRejected as rejection:
            return rejection.result

        except Exception as e:
            if is_lock_timeout(e):
                logger.warning(f"Cancellation of booking {booking_id} timed out waiting for a lock")
                return CancelResult.fail(CancelErrorKind.UNKNOWN, RETRY_MESSAGE)
            logger.error(
                f"Failed to cancel booking {booking_id} for user {requester_id}: {str(e)}",
                exc_info=True,
                extra={"user_id": requester_id, "booking_id": booking_id},
            )
            return CancelResult.fail(
                CancelErrorKind.INTERNAL, "Failed to cancel booking. Please try again later."
            )

        logger.info(f"Booking {booking_id} cancelled by user {requester_id}")
        return CancelResult.ok(booking_id)


# Singleton instance
booking_service = BookingService()
