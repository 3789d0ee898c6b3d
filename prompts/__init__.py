"""Prompt factories for each response category."""
from .base import wrap_json_instructions
from .macro_targets_prompt import create_macro_targets_prompt
from .meal_plan_prompt import create_meal_plan_batch_prompt
from .day_plan_prompt import create_day_plan_prompt
from .grocery_list_prompt import create_grocery_list_prompt
from .workout_plan_prompt import create_workout_plan_prompt

__all__ = [
    "wrap_json_instructions",
    "create_macro_targets_prompt",
    "create_meal_plan_batch_prompt",
    "create_day_plan_prompt",
    "create_grocery_list_prompt",
    "create_workout_plan_prompt",
]
