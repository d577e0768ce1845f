# fitstudy/models/__init__.py
# Import all models so SQLAlchemy can resolve relationships and
# Base.metadata knows every table.

from fitstudy.db.base_class import Base
from fitstudy.models.event import Event
from fitstudy.models.booking import Booking
from fitstudy.models.attendance import AttendanceRecord

__all__ = ["Base", "Event", "Booking", "AttendanceRecord"]
