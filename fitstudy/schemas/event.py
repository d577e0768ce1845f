# fitstudy/schemas/event.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from fitstudy.constants.event_category import EventCategory


class EventCreate(BaseModel):
    title: str = Field(..., json_schema_extra={"example": "Assessment Day - Week 1"})
    category: EventCategory
    start_time: datetime
    end_time: Optional[datetime] = None
    capacity: int = Field(..., gt=0, json_schema_extra={"example": 12})
    description: Optional[str] = None
    location: Optional[str] = None

    @model_validator(mode="after")
    def check_time_range(self):
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self
