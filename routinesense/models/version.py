from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from .common import UTCDateTime, new_id, timestamp_field
from .routine import RoutineStep, TimeOfDay


class RoutineVersion(BaseModel):
    """Immutable numbered snapshot of a routine taken at save time"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default_factory=new_id)
    routine_id: str
    version_number: int = Field(..., ge=1)
    label: Optional[str] = None
    steps: List[RoutineStep] = []
    step_count: int = 0
    name: str
    time_of_day: TimeOfDay
    change_summary: Optional[str] = None
    created_at: UTCDateTime = timestamp_field()
