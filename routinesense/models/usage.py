from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal, get_args

from .common import UTCDateTime, new_id, timestamp_field

UsageAction = Literal[
    "created",
    "updated",
    "deleted",
    "viewed",
    "notes_opened",
    "progress_updated",
]

USAGE_ACTIONS = frozenset(get_args(UsageAction))


class UsageEvent(BaseModel):
    """Best-effort telemetry; never authoritative state"""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=new_id)
    user_id: str
    routine_id: Optional[str] = None
    action: UsageAction
    timestamp: UTCDateTime = timestamp_field()
