# fitstudy/services/missions/mission_service.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from fitstudy import crud
from fitstudy.schemas.mission import MissionStatus
from fitstudy.services.missions.engine import BookedEvent, compute_missions
from fitstudy.utils.time import resolve_now

logger = logging.getLogger(__name__)


class MissionService:
    """Loads a participant's history and runs the mission engine over it."""

    def compute_missions(
        self,
        db: Session,
        *,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> List[MissionStatus]:
        now = resolve_now(now)
        try:
            rows = crud.booking.get_confirmed_with_events(db, user_id=user_id)
            attendance_rows = crud.attendance.list_attended(db, user_id=user_id)
        except Exception as e:
            logger.error(
                f"Failed to load mission history for user {user_id}: {str(e)}",
                exc_info=True,
                extra={"user_id": user_id},
            )
            raise

        bookings = [
            BookedEvent(event_id=event_id, category=category, start_time=start_time)
            for event_id, category, start_time in rows
        ]
        attended = {event_id for event_id, was_there in attendance_rows if was_there}
        return compute_missions(bookings, attended, now)


# Singleton instance
mission_service = MissionService()
