from pydantic import BaseModel
from typing import List, Optional, Literal

from .common import UTCDateTime


class ProductStreak(BaseModel):
    """Consecutive-day usage of one product, derived from completion history"""
    product_name: str
    product_brand: str = ""
    current_streak: int = 0
    longest_streak: int = 0
    last_used_date: str
    routine_step: str = ""
    is_active: bool = False


class StreakSummary(BaseModel):
    active_count: int = 0
    longest_current: Optional[ProductStreak] = None
    needs_attention: List[ProductStreak] = []


class RoutineInsight(BaseModel):
    id: str
    type: Literal["consistency", "conflict", "product", "progress"]
    icon: str
    title: str
    description: str
    severity: Literal["positive", "neutral", "warning"]


class TimelineEvent(BaseModel):
    id: str
    type: Literal["version", "note", "event"]
    icon: str
    icon_color: str
    title: str
    description: str = ""
    timestamp: UTCDateTime
