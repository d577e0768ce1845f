# fitstudy/crud/__init__.py

from .crud_attendance import attendance
from .crud_booking import booking
from .crud_event import event
