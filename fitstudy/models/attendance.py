# fitstudy/models/attendance.py
"""
Per-participant data captured by study staff after an event.

One row per (event, user). ``attended`` drives mission progress; the
measurement columns are filled depending on the event category.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from fitstudy.db.base_class import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String, primary_key=True, index=True)

    attended = Column(Boolean, nullable=True)

    # Shared
    grip_strength = Column(Numeric, nullable=True)
    inbody = Column(Boolean, nullable=True)

    # Assessment day
    chair_stand_30s = Column(Integer, nullable=True)
    single_leg_stand = Column(Numeric, nullable=True)
    up_down_step_count = Column(Integer, nullable=True)

    # Scan
    dexa_scanned = Column(Boolean, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
