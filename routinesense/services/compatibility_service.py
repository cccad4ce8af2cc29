"""
Ingredient compatibility oracle.

Pairs are matched against a rule matrix by substring in either direction,
so "retinol serum" matches the "retinol" rule and "aha" matches "aha toner".
The first matching rule decides; pairs with no rule are safe.
"""
from pydantic import BaseModel
from typing import List, Literal, Optional, Protocol, Tuple
import logging

logger = logging.getLogger(__name__)

CompatibilityLevel = Literal["safe", "caution", "avoid"]


class CompatibilityResult(BaseModel):
    compatible: bool
    level: CompatibilityLevel
    reason: str
    resolution: Optional[str] = None


class PairVerdict(BaseModel):
    pair: Tuple[str, str]
    result: CompatibilityResult


class CompatibilityOracle(Protocol):
    def check_many(self, names: List[str]) -> List[PairVerdict]: ...


COMPATIBILITY_MATRIX = [
    # AVOID combinations
    {
        "ingredient1": ["retinol", "retinoid", "tretinoin"],
        "ingredient2": ["aha", "glycolic acid", "lactic acid"],
        "level": "avoid",
        "reason": "Both are potent exfoliants that can cause severe irritation when combined",
        "resolution": "Use AHAs and retinol on alternate nights",
    },
    {
        "ingredient1": ["retinol", "retinoid", "tretinoin"],
        "ingredient2": ["bha", "salicylic acid"],
        "level": "avoid",
        "reason": "Over-exfoliation and barrier damage risk",
        "resolution": "Use BHA in the morning or on alternate nights",
    },
    {
        "ingredient1": ["retinol", "retinoid"],
        "ingredient2": ["benzoyl peroxide"],
        "level": "avoid",
        "reason": "Benzoyl peroxide oxidizes and deactivates retinol",
        "resolution": "Use benzoyl peroxide in AM, retinol in PM",
    },
    {
        "ingredient1": ["benzoyl peroxide"],
        "ingredient2": ["vitamin c", "ascorbic acid"],
        "level": "avoid",
        "reason": "Benzoyl peroxide oxidizes vitamin C, making it ineffective",
        "resolution": "Never use together; use in completely separate routines",
    },
    {
        "ingredient1": ["aha", "glycolic acid"],
        "ingredient2": ["bha", "salicylic acid"],
        "level": "avoid",
        "reason": "Over-exfoliation risk when layering multiple acids",
        "resolution": "Use on alternate nights or choose combination products",
    },

    # CAUTION combinations
    {
        "ingredient1": ["vitamin c", "ascorbic acid"],
        "ingredient2": ["niacinamide"],
        "level": "caution",
        "reason": "May reduce efficacy of both (though recent research suggests this is minimal)",
        "resolution": "Use in separate routines (Vitamin C AM, Niacinamide PM) or wait 15-20 minutes between",
    },
    {
        "ingredient1": ["vitamin c", "ascorbic acid"],
        "ingredient2": ["aha", "glycolic acid", "lactic acid"],
        "level": "caution",
        "reason": "pH conflicts can reduce Vitamin C stability",
        "resolution": "Use Vitamin C in AM, AHAs in PM",
    },
    {
        "ingredient1": ["vitamin c", "ascorbic acid"],
        "ingredient2": ["retinol", "retinoid"],
        "level": "caution",
        "reason": "Different optimal pH levels may reduce efficacy",
        "resolution": "Use Vitamin C in AM, Retinol in PM for best results",
    },
    {
        "ingredient1": ["retinol", "retinoid"],
        "ingredient2": ["vitamin c"],
        "level": "caution",
        "reason": "Can be irritating for sensitive skin when combined",
        "resolution": "AM/PM split or alternate nights for sensitive skin",
    },

    # SAFE combinations
    {
        "ingredient1": ["niacinamide"],
        "ingredient2": ["hyaluronic acid", "ceramides", "peptides", "squalane"],
        "level": "safe",
        "reason": "Niacinamide pairs well with hydrating and barrier-supporting ingredients",
    },
    {
        "ingredient1": ["hyaluronic acid"],
        "ingredient2": ["vitamin c", "retinol", "niacinamide", "peptides", "ceramides"],
        "level": "safe",
        "reason": "Hyaluronic acid is compatible with almost all actives",
    },
    {
        "ingredient1": ["ceramides"],
        "ingredient2": ["retinol", "aha", "bha", "niacinamide", "vitamin c"],
        "level": "safe",
        "reason": "Ceramides help buffer irritation from actives and support barrier function",
    },
    {
        "ingredient1": ["peptides"],
        "ingredient2": ["hyaluronic acid", "niacinamide", "ceramides", "vitamin c"],
        "level": "safe",
        "reason": "Peptides are gentle and work well with most skincare ingredients",
    },
    {
        "ingredient1": ["centella asiatica", "cica"],
        "ingredient2": ["niacinamide", "hyaluronic acid", "ceramides", "retinol"],
        "level": "safe",
        "reason": "Centella soothes and pairs well with irritating actives",
    },
]


def _matches(name: str, terms: List[str]) -> bool:
    return any(term in name or name in term for term in terms)


class IngredientCompatibilityOracle:
    """Read-only compatibility lookups over COMPATIBILITY_MATRIX"""

    def __init__(self, matrix: Optional[List[dict]] = None):
        self.matrix = matrix if matrix is not None else COMPATIBILITY_MATRIX

    def check(self, first: str, second: str) -> CompatibilityResult:
        first = first.lower()
        second = second.lower()

        for rule in self.matrix:
            forward = _matches(first, rule["ingredient1"]) and _matches(second, rule["ingredient2"])
            backward = _matches(second, rule["ingredient1"]) and _matches(first, rule["ingredient2"])
            if forward or backward:
                return CompatibilityResult(
                    compatible=rule["level"] != "avoid",
                    level=rule["level"],
                    reason=rule["reason"],
                    resolution=rule.get("resolution"),
                )

        return CompatibilityResult(
            compatible=True,
            level="safe",
            reason="No known conflicts between these ingredients.",
        )

    def check_many(self, names: List[str]) -> List[PairVerdict]:
        """Every non-safe pair, in (i, j) order with i < j"""
        verdicts = []
        for i in range(len(names)):
            for j in range(i + 1, len(names)):
                result = self.check(names[i], names[j])
                if result.level != "safe":
                    verdicts.append(PairVerdict(pair=(names[i], names[j]), result=result))
        return verdicts


# Global instance
ingredient_oracle = IngredientCompatibilityOracle()
