from .routine_store import RoutineStore, merge_routines
from .usage_log_service import UsageLogService
from .completion_service import CompletionService
from .streak_engine import compute_streaks, get_streak_summary
from .insight_engine import generate_insights, DEFAULT_RULES
from .compatibility_service import ingredient_oracle
from .version_store import VersionStore, diff_steps
from .notes_service import NotesService
from .timeline_builder import build_timeline
from .routine_editor import RoutineEditor

__all__ = [
    "RoutineStore", "merge_routines",
    "UsageLogService",
    "CompletionService",
    "compute_streaks", "get_streak_summary",
    "generate_insights", "DEFAULT_RULES",
    "ingredient_oracle",
    "VersionStore", "diff_steps",
    "NotesService",
    "build_timeline",
    "RoutineEditor"
]
