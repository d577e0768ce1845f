# fitstudy/schemas/mission.py
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class MissionState(str, Enum):
    NOT_STARTED = "not_started"
    INCOMPLETE = "incomplete"
    COMPLETED = "completed"


class MissionStatus(BaseModel):
    id: int
    title: str
    description: str
    status: MissionState
    locked: bool
    progress_text: Optional[str] = None
    unlock_date: Optional[datetime] = None

    model_config = {"frozen": True}
