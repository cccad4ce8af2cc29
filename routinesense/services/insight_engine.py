"""
Rule-based routine insights.

Each rule is an independent unit with ``evaluate(context)`` returning one
insight or None. ``generate_insights`` runs the rules in order and keeps
the first ``MAX_INSIGHTS`` results; insights are not re-sorted by severity.
"""
import logging
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from routinesense.core.config import settings
from routinesense.models.insights import ProductStreak, RoutineInsight
from routinesense.models.routine import RoutineDefinition
from routinesense.models.user import SkinProfile

logger = logging.getLogger(__name__)


class InsightContext(BaseModel):
    """Everything a rule may look at. Read-only."""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    routines: List[RoutineDefinition] = []
    streaks: List[ProductStreak] = []
    note_count: int = 0
    skin_profile: SkinProfile = SkinProfile()
    oracle: Optional[Any] = None


class InsightRule:
    name = "rule"

    def evaluate(self, context: InsightContext) -> Optional[RoutineInsight]:
        raise NotImplementedError


def _find_streak(streaks: Sequence[ProductStreak], needle: str) -> Optional[ProductStreak]:
    for streak in streaks:
        if needle in streak.product_name.lower():
            return streak
    return None


class StrongStreakRule(InsightRule):
    name = "strong_streak"
    threshold = 7

    def evaluate(self, context):
        streak = next((s for s in context.streaks if s.current_streak >= self.threshold), None)
        if streak is None:
            return None
        return RoutineInsight(
            id="streak-strong",
            type="consistency",
            icon="ri-fire-line",
            title=f"{streak.current_streak}-day streak with {streak.product_name}",
            description="Consistency is key for skincare results. Most actives need 4-6 weeks to show visible improvement.",
            severity="positive",
        )


class BrokenStreakRule(InsightRule):
    name = "broken_streak"
    threshold = 5

    def evaluate(self, context):
        streak = next(
            (s for s in context.streaks if s.current_streak == 0 and s.longest_streak >= self.threshold),
            None,
        )
        if streak is None:
            return None
        return RoutineInsight(
            id="streak-broken",
            type="consistency",
            icon="ri-alert-line",
            title=f"{streak.product_name} streak ended",
            description=f"You had a {streak.longest_streak}-day streak. Resuming consistent use helps maintain benefits.",
            severity="warning",
        )


class IngredientConflictRule(InsightRule):
    """First "avoid" pair found, scanning routines in order"""
    name = "ingredient_conflict"
    fallback_resolution = "Consider using these at different times of day."

    def evaluate(self, context):
        if context.oracle is None:
            return None
        for routine in context.routines:
            names = [name.lower() for name in routine.product_names()]
            if len(names) < 2:
                continue
            for verdict in context.oracle.check_many(names):
                if verdict.result.level != "avoid":
                    continue
                first, second = verdict.pair
                return RoutineInsight(
                    id=f"conflict-{first}-{second}",
                    type="conflict",
                    icon="ri-error-warning-line",
                    title=f"{first} + {second} conflict detected",
                    description=verdict.result.resolution or self.fallback_resolution,
                    severity="warning",
                )
        return None


class RetinolAdjustmentRule(InsightRule):
    name = "retinol_adjustment"
    threshold = 14

    def evaluate(self, context):
        if not context.skin_profile.concerns or not context.skin_profile.has_concern("aging"):
            return None
        streak = _find_streak(context.streaks, "retinol")
        if streak is None or streak.current_streak < self.threshold:
            return None
        return RoutineInsight(
            id="retinol-progress",
            type="product",
            icon="ri-leaf-line",
            title="Retinol adjustment period",
            description=f"{streak.current_streak} days in: initial dryness or flaking typically stabilizes around week 4-6.",
            severity="neutral",
        )


class VitaminCBrighteningRule(InsightRule):
    name = "vitamin_c_brightening"

    def evaluate(self, context):
        if not context.skin_profile.has_concern("hyperpigmentation"):
            return None
        if _find_streak(context.streaks, "vitamin c") is None:
            return None
        return RoutineInsight(
            id="vitc-brightening",
            type="product",
            icon="ri-sun-line",
            title="Brightening progress",
            description="Vitamin C works gradually. Visible brightening typically appears after 3-4 weeks of consistent AM use.",
            severity="positive",
        )


class JournalRule(InsightRule):
    name = "journal"
    active_threshold = 5

    def evaluate(self, context):
        if context.note_count >= self.active_threshold:
            return RoutineInsight(
                id="notes-active",
                type="progress",
                icon="ri-file-text-line",
                title="Active skin journal",
                description=f"You've logged {context.note_count} notes. Regular tracking helps identify what works for your skin.",
                severity="positive",
            )
        if context.note_count == 0 and context.routines:
            return RoutineInsight(
                id="notes-missing",
                type="progress",
                icon="ri-file-text-line",
                title="Start tracking observations",
                description="Logging how your skin responds helps refine your routine over time.",
                severity="neutral",
            )
        return None


class RoutineBalanceRule(InsightRule):
    name = "routine_balance"

    def evaluate(self, context):
        has_morning = any(r.time_of_day == "morning" for r in context.routines)
        has_evening = any(r.time_of_day == "evening" for r in context.routines)

        if has_morning and has_evening:
            return RoutineInsight(
                id="balanced-routine",
                type="consistency",
                icon="ri-sun-line",
                title="Balanced AM + PM routine",
                description="Having both morning and evening routines provides full-day protection and overnight repair.",
                severity="positive",
            )
        if has_morning:
            return RoutineInsight(
                id="missing-pm",
                type="consistency",
                icon="ri-moon-line",
                title="Consider adding an evening routine",
                description="Nighttime is when skin does most of its repair work. An evening routine maximizes recovery.",
                severity="neutral",
            )
        return None


DEFAULT_RULES: List[InsightRule] = [
    StrongStreakRule(),
    BrokenStreakRule(),
    IngredientConflictRule(),
    RetinolAdjustmentRule(),
    VitaminCBrighteningRule(),
    JournalRule(),
    RoutineBalanceRule(),
]


def run_rules(context: InsightContext, rules: Sequence[InsightRule] = DEFAULT_RULES,
              limit: int = settings.MAX_INSIGHTS) -> List[RoutineInsight]:
    insights = []
    for rule in rules:
        try:
            insight = rule.evaluate(context)
        except Exception as e:
            logger.error(f"[InsightEngine] Rule '{rule.name}' failed: {e}")
            continue
        if insight is not None:
            insights.append(insight)
    return insights[:limit]


def generate_insights(
    routines: List[RoutineDefinition],
    streaks: List[ProductStreak],
    note_count: int,
    skin_profile: Optional[SkinProfile] = None,
    oracle=None,
    rules: Sequence[InsightRule] = DEFAULT_RULES,
) -> List[RoutineInsight]:
    if oracle is None:
        from routinesense.services.compatibility_service import ingredient_oracle
        oracle = ingredient_oracle

    context = InsightContext(
        routines=routines,
        streaks=streaks,
        note_count=note_count,
        skin_profile=skin_profile or SkinProfile(),
        oracle=oracle,
    )
    return run_rules(context, rules)
