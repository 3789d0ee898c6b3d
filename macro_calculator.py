"""
Per-meal macro targets computed in Python before prompting.

Daily protein/carbs/fats targets (from the MACRO_SET response) are split over
the meals of a day so the meal-plan prompt can state exact per-meal numbers
instead of asking the model to do the arithmetic.
"""

from typing import Dict, Iterable, List, Optional

from schemas import DayPlan, MacroTarget


# Daily targets used when the macro response lacks a nutrient (grams)
DEFAULT_DAILY_MACROS = {
    "protein": 150.0,
    "carbs": 200.0,
    "fats": 60.0,
}

# Accepted spellings of each nutrient in MACRO_SET responses
NUTRIENT_ALIASES = {
    "protein": ("protein", "proteins"),
    "carbs": ("carbohydrates", "carbohydrate", "carbs", "carb"),
    "fats": ("fats", "fat"),
}

# Share of the daily target per meal slot (sums to 1.0)
MEAL_MACRO_DISTRIBUTION = {
    "breakfast": 0.25,
    "lunch": 0.35,
    "dinner": 0.30,
    "snack": 0.10,
}


def find_macro_amount(macro_targets: Iterable[MacroTarget], nutrient: str) -> Optional[float]:
    """Find the daily amount for a nutrient, matching its accepted spellings.

    Args:
        macro_targets: Normalized macro targets
        nutrient: Canonical nutrient key ("protein", "carbs" or "fats")

    Returns:
        Amount in grams, or None if absent or zero
    """
    aliases = NUTRIENT_ALIASES.get(nutrient, (nutrient,))
    for target in macro_targets:
        if target.nutrient.strip().lower() in aliases and target.amount > 0:
            return target.amount
    return None


def resolve_daily_macros(macro_targets: Iterable[MacroTarget]) -> Dict[str, float]:
    """Daily protein/carbs/fats targets with defaults for missing nutrients."""
    targets = list(macro_targets)
    resolved = {}
    for nutrient, default in DEFAULT_DAILY_MACROS.items():
        amount = find_macro_amount(targets, nutrient)
        resolved[nutrient] = amount if amount is not None else default
    return resolved


def distribute_macros(daily_macros: Dict[str, float]) -> Dict[str, Dict[str, int]]:
    """Split daily macros across meal slots, rounded to whole grams.

    Example:
        >>> distribute_macros({"protein": 160, "carbs": 200, "fats": 60})["lunch"]
        {'protein': 56, 'carbs': 70, 'fats': 21}
    """
    return {
        meal: {
            nutrient: int(round(amount * share))
            for nutrient, amount in daily_macros.items()
        }
        for meal, share in MEAL_MACRO_DISTRIBUTION.items()
    }


def sum_day_macros(day_plan: DayPlan) -> Dict[str, float]:
    """Total calories and macros of a day plan (breakfast, lunch, dinner, snacks)."""
    totals = {"calories": 0.0, "protein": 0.0, "carbs": 0.0, "fats": 0.0}
    for meal in day_plan.meals():
        totals["calories"] += meal.calories
        totals["protein"] += meal.macros.protein
        totals["carbs"] += meal.macros.carbs
        totals["fats"] += meal.macros.fats
    return totals


def protein_shortfalls(
    days: Dict[str, DayPlan], daily_protein: float, tolerance: float = 0.18
) -> List[str]:
    """Days whose protein total is below target by more than `tolerance`.

    Used for logging only; model output is never rejected on macro accuracy.
    """
    floor = daily_protein * (1 - tolerance)
    return [day for day, plan in days.items() if sum_day_macros(plan)["protein"] < floor]
