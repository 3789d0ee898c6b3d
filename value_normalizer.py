"""Coercion of validated payloads into typed, frozen records.

Every numeric field goes through `clean_numeric_value` and every text field
through `clean_text_value`, so the resulting records always hold finite,
non-negative numbers and defined strings. Normalization never fails on a
payload the validator accepted.
"""

import math
import re
from typing import Any, Dict, List

from payload_access import get_dict, get_list, get_path
from schemas import (
    DayPlan,
    DayWorkout,
    GroceryItem,
    GroceryList,
    MacroTarget,
    MacroTargetSet,
    Meal,
    MealMacros,
    MealPlan,
    ResponseCategory,
    WorkoutExercise,
    WorkoutPlan,
)
from validation_config import DAY_TOKENS, MEAL_SLOTS, PLAN_TIERS, normalize_day_token

# "8-12", "8 - 12", "8 to 12", "8–12": take the lower bound
_NUMERIC_RANGE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:-|–|to)\s*\d")
_NON_NUMERIC = re.compile(r"[^\d.]")


def _finite_non_negative(value: float) -> float:
    # Integers too large for a float count as non-finite
    try:
        as_float = float(value)
    except OverflowError:
        return 0
    if not math.isfinite(as_float) or as_float < 0:
        return 0
    return value


def clean_numeric_value(value: Any) -> float:
    """Tolerant number coercion with a 0 default.

    Examples:
        >>> clean_numeric_value("30g")
        30.0
        >>> clean_numeric_value("8-12")
        8.0
        >>> clean_numeric_value(None)
        0
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return _finite_non_negative(value)
    if not isinstance(value, str):
        return 0

    match = _NUMERIC_RANGE.match(value)
    if match:
        return _finite_non_negative(float(match.group(1)))

    digits = _NON_NUMERIC.sub("", value)
    # Keep only the first decimal point
    head, dot, tail = digits.partition(".")
    candidate = head + dot + tail.replace(".", "")
    try:
        return _finite_non_negative(float(candidate))
    except ValueError:
        return 0


def clean_int_value(value: Any) -> int:
    return int(clean_numeric_value(value))


def clean_text_value(value: Any, default: str = "") -> str:
    """String coercion; None and empty values fall back to `default`."""
    if value is None or isinstance(value, (dict, list)):
        return default
    text = value if isinstance(value, str) else str(value)
    return text if text else default


# ============================================================================
# Meals
# ============================================================================


def normalize_meal(payload: Any) -> Meal:
    return Meal(
        name=clean_text_value(get_path(payload, "name")),
        time=clean_text_value(get_path(payload, "time")),
        recipe=clean_text_value(get_path(payload, "recipe")),
        calories=clean_numeric_value(get_path(payload, "calories")),
        macros=MealMacros(
            protein=clean_numeric_value(get_path(payload, "macros", "protein")),
            carbs=clean_numeric_value(get_path(payload, "macros", "carbs")),
            fats=clean_numeric_value(get_path(payload, "macros", "fats")),
        ),
    )


def _snack_payloads(payload: Any) -> List[Any]:
    snacks = get_path(payload, "snacks")
    if isinstance(snacks, list):
        return snacks
    # Weekly prompts ask for a single "snack" object
    snack = get_path(payload, "snack")
    return [snack] if isinstance(snack, dict) else []


def normalize_day_plan(payload: Any) -> DayPlan:
    """Rebuild every meal slot; snacks are kept element by element."""
    meals = {slot: normalize_meal(get_dict(payload, slot)) for slot in MEAL_SLOTS}
    snacks = [normalize_meal(snack) for snack in _snack_payloads(payload)]
    return DayPlan(snacks=snacks, **meals)


def normalize_tier(payload: Any) -> Dict[str, DayPlan]:
    """Day-token keyed plans for one tier; unknown day keys are dropped."""
    days: Dict[str, DayPlan] = {}
    if not isinstance(payload, dict):
        return days
    for key, day_payload in payload.items():
        day = normalize_day_token(key)
        if day in DAY_TOKENS:
            days[day] = normalize_day_plan(day_payload)
    return days


def normalize_meal_plan(data: Any) -> MealPlan:
    tiers = {tier: normalize_tier(get_path(data, "mealPlan", tier)) for tier in PLAN_TIERS}
    return MealPlan(**tiers)


def normalize_single_day_plan(data: Any) -> DayPlan:
    return normalize_day_plan(get_dict(data, "dayPlan"))


# ============================================================================
# Macro targets, groceries, workouts
# ============================================================================


def normalize_macro_set(data: Any) -> MacroTargetSet:
    targets = [
        MacroTarget(
            nutrient=clean_text_value(get_path(target, "nutrient")),
            amount=clean_numeric_value(get_path(target, "amount")),
            details=clean_text_value(get_path(target, "details")),
        )
        for target in get_list(data, "macroTargets")
        if isinstance(target, dict)
    ]
    return MacroTargetSet(macro_targets=targets)


def normalize_grocery_list(data: Any) -> GroceryList:
    items = [
        GroceryItem(
            item=clean_text_value(get_path(entry, "item")).strip(),
            quantity=clean_numeric_value(get_path(entry, "quantity")),
            unit=clean_text_value(get_path(entry, "unit"), default="unit"),
            price=clean_numeric_value(get_path(entry, "price")),
            notes=clean_text_value(get_path(entry, "notes")),
        )
        for entry in get_list(data, "groceryList")
        if isinstance(entry, dict)
    ]
    return GroceryList(items=items)


def normalize_exercise(payload: Any) -> WorkoutExercise:
    return WorkoutExercise(
        name=clean_text_value(get_path(payload, "name")),
        sets=clean_int_value(get_path(payload, "sets")),
        reps=clean_int_value(get_path(payload, "reps")),
        rest=clean_numeric_value(get_path(payload, "rest")),
        notes=clean_text_value(get_path(payload, "notes")),
    )


def normalize_workout_plan(data: Any) -> WorkoutPlan:
    days = [
        DayWorkout(
            day=clean_text_value(get_path(day, "day")),
            focus=clean_text_value(get_path(day, "focus")),
            exercises=[
                normalize_exercise(exercise)
                for exercise in get_list(day, "exercises")
                if isinstance(exercise, dict)
            ],
        )
        for day in get_list(data, "workoutPlan")
        if isinstance(day, dict)
    ]
    return WorkoutPlan(days=days)


NORMALIZERS = {
    ResponseCategory.MACRO_SET: normalize_macro_set,
    ResponseCategory.MEAL_BATCH: normalize_meal_plan,
    ResponseCategory.GROCERY_LIST: normalize_grocery_list,
    ResponseCategory.WORKOUT_PLAN: normalize_workout_plan,
    ResponseCategory.SINGLE_DAY_PLAN: normalize_single_day_plan,
}


def normalize(validated: Any, category: ResponseCategory):
    """Build the typed record for a validated payload.

    Returns:
        MacroTargetSet, MealPlan, GroceryList, WorkoutPlan or DayPlan
        depending on `category`
    """
    return NORMALIZERS[category](validated)
