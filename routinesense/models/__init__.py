from .routine import RoutineProduct, RoutineStep, RoutineDefinition, CompletionRecord, RoutineNote
from .version import RoutineVersion
from .usage import UsageEvent, USAGE_ACTIONS
from .insights import ProductStreak, StreakSummary, RoutineInsight, TimelineEvent
from .user import SkinProfile, LegacySkinProfile, migrate_skin_profile

__all__ = [
    "RoutineProduct", "RoutineStep", "RoutineDefinition", "CompletionRecord", "RoutineNote",
    "RoutineVersion",
    "UsageEvent", "USAGE_ACTIONS",
    "ProductStreak", "StreakSummary", "RoutineInsight", "TimelineEvent",
    "SkinProfile", "LegacySkinProfile", "migrate_skin_profile"
]
