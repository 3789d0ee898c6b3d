"""Centralized plan-structure constants.

Single source of truth for the week layout used across:
- response_validator.py / value_normalizer.py (day keys, meal slots)
- builders/meal_plan_builder.py (batch split, coverage check)
- builders/day_plan_builder.py (tier/day arguments)
"""

from typing import Dict, Iterable, List, Mapping, Tuple


# Fixed lowercase day tokens, in week order
DAY_TOKENS: Tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# The week is requested in two batches (4 + 3 days) to avoid truncated responses
WEEK_BATCHES: Tuple[Tuple[str, ...], ...] = (
    DAY_TOKENS[:4],
    DAY_TOKENS[4:],
)

PLAN_TIERS: Tuple[str, ...] = ("affordable", "premium")

# Named meal slots of a day plan; snacks are a separate list
MEAL_SLOTS: Tuple[str, ...] = ("breakfast", "lunch", "dinner")

# Expected number of days in a workout plan
WORKOUT_PLAN_DAYS = 7


def normalize_day_token(value: str) -> str:
    """Lowercase and trim a day name ("Monday " -> "monday")."""
    return value.strip().lower() if isinstance(value, str) else ""


def missing_days(plan: Mapping[str, object], expected: Iterable[str] = DAY_TOKENS) -> List[str]:
    """Days of `expected` that have no entry in `plan`.

    Args:
        plan: Mapping of day token -> day plan for one tier
        expected: Day tokens that should be present

    Returns:
        Missing day tokens in week order
    """
    return [day for day in expected if day not in plan]


def check_week_coverage(tiers: Mapping[str, Mapping[str, object]]) -> Dict[str, List[str]]:
    """Missing days per tier; tiers with full coverage are omitted."""
    coverage: Dict[str, List[str]] = {}
    for tier in PLAN_TIERS:
        missing = missing_days(tiers.get(tier, {}))
        if missing:
            coverage[tier] = missing
    return coverage
