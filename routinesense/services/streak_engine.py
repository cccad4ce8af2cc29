"""
Product usage streaks.

A completed routine counts as one day of use for every product attached to
its steps. Streaks are recomputed from the full completion history on
every call; nothing is cached or persisted.
"""
import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Set

from routinesense.core.config import settings
from routinesense.models.insights import ProductStreak, StreakSummary
from routinesense.models.routine import CompletionRecord, RoutineDefinition
from routinesense.utils.date_utils import iter_days_back, parse_day_string, utc_today

logger = logging.getLogger(__name__)


def _step_label(routine: RoutineDefinition, title: str) -> str:
    prefix = "AM" if routine.time_of_day == "morning" else "PM"
    return f"{prefix} — {title}"


def _display_name(product_key: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in product_key.split(" "))


def current_streak(dates: Set[date], today: date, max_days: int = settings.STREAK_LOOKBACK_DAYS) -> int:
    """Consecutive days ending today; 0 when today is missing"""
    streak = 0
    for day in iter_days_back(today, max_days):
        if day not in dates:
            break
        streak += 1
    return streak


def longest_streak(dates: Iterable[date]) -> int:
    longest = 0
    running = 0
    previous = None
    for day in sorted(set(dates)):
        if previous is not None and day - previous == timedelta(days=1):
            running += 1
        else:
            running = 1
        longest = max(longest, running)
        previous = day
    return longest


def compute_streaks(
    routines: List[RoutineDefinition],
    history: List[CompletionRecord],
    today: Optional[date] = None,
) -> List[ProductStreak]:
    """Per-product streaks, highest current streak first"""
    if not routines or not history:
        return []
    today = today or utc_today()

    routine_products: Dict[str, List[dict]] = {}
    for routine in routines:
        routine_products[routine.id] = [
            {
                "key": step.product.name.lower(),
                "brand": step.product.brand,
                "step": _step_label(routine, step.title),
            }
            for step in routine.steps
            if step.product
        ]

    product_dates: Dict[str, dict] = {}
    for completion in history:
        products = routine_products.get(completion.routine_id)
        if not products:
            continue
        try:
            day = parse_day_string(completion.date)
        except ValueError:
            logger.warning(f"[Streaks] Ignoring completion with bad date '{completion.date}'")
            continue
        for product in products:
            entry = product_dates.setdefault(
                product["key"],
                {"brand": product["brand"], "step": product["step"], "dates": set()},
            )
            entry["dates"].add(day)

    streaks = []
    for key, data in product_dates.items():
        dates = data["dates"]
        streaks.append(ProductStreak(
            product_name=_display_name(key),
            product_brand=data["brand"],
            current_streak=current_streak(dates, today),
            longest_streak=longest_streak(dates),
            last_used_date=max(dates).isoformat(),
            routine_step=data["step"],
            is_active=today in dates,
        ))

    # sorted() is stable, so ties keep first-seen order
    return sorted(streaks, key=lambda streak: streak.current_streak, reverse=True)


def get_streak_summary(streaks: List[ProductStreak]) -> StreakSummary:
    longest = None
    for streak in streaks:
        if longest is None or streak.current_streak > longest.current_streak:
            longest = streak

    return StreakSummary(
        active_count=sum(1 for streak in streaks if streak.is_active),
        longest_current=longest,
        needs_attention=[
            streak for streak in streaks
            if streak.current_streak == 0 and streak.longest_streak > 3
        ],
    )
