# fitstudy/schemas/attendance.py
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class AttendanceUpsert(BaseModel):
    """Values entered by study staff for one participant at one event."""

    attended: Optional[bool] = None
    grip_strength: Optional[Decimal] = Field(None, ge=0)
    inbody: Optional[bool] = None
    chair_stand_30s: Optional[int] = Field(None, ge=0)
    single_leg_stand: Optional[Decimal] = Field(None, ge=0)
    up_down_step_count: Optional[int] = Field(None, ge=0)
    dexa_scanned: Optional[bool] = None
