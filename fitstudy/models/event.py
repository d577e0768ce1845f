# fitstudy/models/event.py
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from fitstudy.constants.event_category import EventCategory
from fitstudy.db.base_class import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(
        String, primary_key=True, default=lambda: f"evt_{uuid.uuid4().hex[:12]}"
    )
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    location = Column(String, nullable=True)
    category = Column(
        Enum(
            EventCategory,
            name="check_event_category",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        index=True,
    )
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    capacity = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    bookings = relationship("Booking", back_populates="event")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="check_event_capacity_positive"),
    )
