from pydantic import BaseModel, Field
from typing import List

from routinesense.models.insights import ProductStreak, StreakSummary


class RoutineCountResponse(BaseModel):
    count: int


class CompletionToggleResponse(BaseModel):
    routine_id: str
    completed_today: bool
    today_count: int


class StreaksResponse(BaseModel):
    streaks: List[ProductStreak]
    summary: StreakSummary


class NoteCreateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    note_type: str = "observation"


class OperationStatusResponse(BaseModel):
    success: bool
