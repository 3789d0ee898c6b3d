"""Domain request builders: one entry point per part of the fitness plan."""
from .macro_targets_builder import generate_macro_targets
from .meal_plan_builder import generate_meal_plans, merge_meal_batches
from .grocery_list_builder import generate_grocery_list
from .workout_plan_builder import generate_workout_plan
from .day_plan_builder import generate_day_plan

__all__ = [
    "generate_macro_targets",
    "generate_meal_plans",
    "merge_meal_batches",
    "generate_grocery_list",
    "generate_workout_plan",
    "generate_day_plan",
]
