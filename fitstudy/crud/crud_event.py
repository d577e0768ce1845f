# fitstudy/crud/crud_event.py
"""CRUD operations for study events."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from fitstudy.models.event import Event
from fitstudy.schemas.event import EventCreate
from fitstudy.utils.time import ensure_utc

logger = logging.getLogger(__name__)


class CRUDEvent:
    """CRUD operations for Event."""

    def create(self, db: Session, *, obj_in: EventCreate) -> Event:
        """Create a new event. Times are stored in UTC."""
        obj_data = obj_in.model_dump()
        obj_data["start_time"] = ensure_utc(obj_data["start_time"])
        if obj_data.get("end_time") is not None:
            obj_data["end_time"] = ensure_utc(obj_data["end_time"])

        db_obj = Event(**obj_data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        logger.info(f"Event {db_obj.id} created ({db_obj.category.value}, capacity {db_obj.capacity})")
        return db_obj

    def get(self, db: Session, event_id: str) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id).first()

    def lock_and_get(self, db: Session, *, event_id: str) -> Optional[Event]:
        """
        Fetch an event with SELECT FOR UPDATE.

        The lock is held until the surrounding transaction ends, so concurrent
        bookers of the same event queue up behind each other here.
        """
        return db.query(Event).filter(Event.id == event_id).with_for_update().first()


# Singleton instance
event = CRUDEvent()
