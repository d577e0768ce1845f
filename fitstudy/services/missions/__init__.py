# fitstudy/services/missions/__init__.py
from .engine import BookedEvent, compute_missions, follow_up_unlock_date
from .mission_service import MissionService, mission_service

__all__ = [
    "BookedEvent",
    "MissionService",
    "compute_missions",
    "follow_up_unlock_date",
    "mission_service",
]
