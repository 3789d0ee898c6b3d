"""Structural validation of parsed LLM payloads, one rule set per category.

The validator only decides accept/reject; value coercion happens later in
value_normalizer.py. Validation is fail-closed: any unexpected error while
reading the payload counts as a rejection.
"""

from typing import Any, Callable, Dict

from observability import setup_structured_logger
from payload_access import (
    empty_meal_payload,
    get_dict,
    get_list,
    get_path,
    is_number,
    is_text,
)
from schemas import ResponseCategory
from validation_config import MEAL_SLOTS

logger = setup_structured_logger("fitplan.validator")


def is_valid_meal(meal: Any) -> bool:
    """Full meal predicate: text name/time/recipe, numeric calories and macros."""
    if not isinstance(meal, dict):
        return False
    return (
        is_text(meal.get("name"))
        and is_text(meal.get("time"))
        and is_text(meal.get("recipe"))
        and is_number(meal.get("calories"))
        and is_number(get_path(meal, "macros", "protein"))
        and is_number(get_path(meal, "macros", "carbs"))
        and is_number(get_path(meal, "macros", "fats"))
    )


def _is_valid_batch_breakfast(meal: Any) -> bool:
    # Weekly batches only need protein among the macros
    if not isinstance(meal, dict):
        return False
    return (
        is_text(meal.get("name"))
        and is_text(meal.get("time"))
        and is_text(meal.get("recipe"))
        and is_number(meal.get("calories"))
        and is_number(get_path(meal, "macros", "protein"))
    )


def validate_macro_set(data: Any) -> bool:
    targets = get_list(data, "macroTargets")
    if not targets:
        return False
    return all(
        isinstance(target, dict)
        and is_text(target.get("nutrient"))
        and is_number(target.get("amount"))
        and is_text(target.get("details"))
        for target in targets
    )


def validate_meal_batch(data: Any) -> bool:
    """Accept a weekly batch when at least one affordable day has a usable breakfast."""
    affordable = get_dict(data, "mealPlan", "affordable")
    return any(
        _is_valid_batch_breakfast(get_path(day_plan, "breakfast"))
        for day_plan in affordable.values()
    )


def validate_grocery_list(data: Any) -> bool:
    items = get_list(data, "groceryList")
    if not items:
        return False
    return all(
        isinstance(item, dict)
        and is_text(item.get("item"))
        and is_number(item.get("quantity"))
        and is_text(item.get("unit"))
        and is_number(item.get("price"))
        for item in items
    )


def validate_workout_plan(data: Any) -> bool:
    days = get_list(data, "workoutPlan")
    if not days:
        return False
    return all(
        isinstance(day, dict)
        and is_text(day.get("day"))
        and is_text(day.get("focus"))
        and isinstance(day.get("exercises"), list)
        for day in days
    )


def validate_day_plan(data: Any) -> bool:
    """Complete the day plan in place, then accept it if any supplied meal is valid.

    Missing or non-object breakfast/lunch/dinner become empty meals and a
    missing snacks list becomes []. This is the only validator that mutates
    its input. Slots filled here do not count toward acceptance, since an
    empty meal always passes the shape check.
    """
    plan = get_path(data, "dayPlan")
    if not isinstance(plan, dict):
        return False

    supplied = [plan[slot] for slot in MEAL_SLOTS if isinstance(plan.get(slot), dict)]

    for slot in MEAL_SLOTS:
        if not isinstance(plan.get(slot), dict):
            plan[slot] = empty_meal_payload()
    if not isinstance(plan.get("snacks"), list):
        plan["snacks"] = []

    return any(is_valid_meal(meal) for meal in supplied + plan["snacks"])


VALIDATORS: Dict[ResponseCategory, Callable[[Any], bool]] = {
    ResponseCategory.MACRO_SET: validate_macro_set,
    ResponseCategory.MEAL_BATCH: validate_meal_batch,
    ResponseCategory.GROCERY_LIST: validate_grocery_list,
    ResponseCategory.WORKOUT_PLAN: validate_workout_plan,
    ResponseCategory.SINGLE_DAY_PLAN: validate_day_plan,
}


def validate(parsed: Any, category: ResponseCategory) -> bool:
    """Check a parsed payload against the rules of its category.

    Args:
        parsed: Result of json parsing the sanitized text
        category: Expected response shape

    Returns:
        True if the payload is structurally acceptable; never raises
    """
    validator = VALIDATORS.get(category)
    if validator is None:
        return False
    try:
        return bool(validator(parsed))
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            f"Validator for {category.value} raised {type(exc).__name__}: {exc}",
            extra={"extra_fields": {"category": category.value}},
        )
        return False
