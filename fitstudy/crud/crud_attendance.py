# fitstudy/crud/crud_attendance.py
"""CRUD operations for per-participant attendance and measurements."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import and_
from sqlalchemy.orm import Session

from fitstudy.models.attendance import AttendanceRecord
from fitstudy.schemas.attendance import AttendanceUpsert

logger = logging.getLogger(__name__)


class CRUDAttendance:
    """CRUD operations for AttendanceRecord."""

    def get(self, db: Session, *, event_id: str, user_id: str) -> Optional[AttendanceRecord]:
        return db.query(AttendanceRecord).filter(
            and_(
                AttendanceRecord.event_id == event_id,
                AttendanceRecord.user_id == user_id,
            )
        ).first()

    def upsert(
        self,
        db: Session,
        *,
        event_id: str,
        user_id: str,
        obj_in: AttendanceUpsert,
    ) -> AttendanceRecord:
        """Create or update the record for (event, user). Only fields that were set are written."""
        record = self.get(db, event_id=event_id, user_id=user_id)
        if record is None:
            record = AttendanceRecord(event_id=event_id, user_id=user_id)
            db.add(record)

        for field, value in obj_in.model_dump(exclude_unset=True).items():
            setattr(record, field, value)

        db.commit()
        db.refresh(record)
        logger.info(f"Attendance saved for user {user_id}, event {event_id}")
        return record

    def list_attended(self, db: Session, *, user_id: str) -> List[Tuple[str, bool]]:
        """(event_id, attended) for every record of a user. A null flag counts as not attended."""
        rows = db.query(AttendanceRecord.event_id, AttendanceRecord.attended).filter(
            AttendanceRecord.user_id == user_id
        ).all()
        return [(event_id, attended is True) for event_id, attended in rows]


# Singleton instance
attendance = CRUDAttendance()
