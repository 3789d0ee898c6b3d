"""Pydantic models for normalized plan records."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ResponseCategory(str, Enum):
    """Expected shape of an LLM response; drives validation and normalization."""

    MACRO_SET = "macro"
    MEAL_BATCH = "meal"
    GROCERY_LIST = "grocery"
    WORKOUT_PLAN = "workout"
    SINGLE_DAY_PLAN = "dayPlan"


PlanTier = Literal["affordable", "premium"]

Goal = Literal["weight-loss", "weight-gain", "muscle-gain", "maintenance"]

ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very-active"]


class FrozenRecord(BaseModel):
    """Base for records built once by the normalizer and never mutated."""

    model_config = {"frozen": True}


# ============================================================================
# Caller input
# ============================================================================


class PersonalData(BaseModel):
    """Profile collected by the calling application."""

    age: int = Field(..., ge=1, le=120, description="Age in years")
    weight: float = Field(..., gt=0, description="Body weight in kg")
    height: float = Field(..., gt=0, description="Height in cm")
    gender: Literal["male", "female"] = Field(..., description="Biological sex")
    activity_level: ActivityLevel = Field(
        default="moderate", description="Self-reported activity level"
    )
    goal: Goal = Field(..., description="Training goal driving macros and workouts")


# ============================================================================
# Macro targets
# ============================================================================


class MacroTarget(FrozenRecord):
    """Daily target for a single nutrient."""

    nutrient: str = Field(..., description="Nutrient name (protein, carbohydrates, fats)")
    amount: float = Field(..., ge=0, description="Daily amount in grams")
    details: str = Field(default="", description="Short rationale for the target")


class MacroTargetSet(FrozenRecord):
    """Normalized MACRO_SET response."""

    macro_targets: List[MacroTarget] = Field(default_factory=list)


# ============================================================================
# Meal plans
# ============================================================================


class MealMacros(FrozenRecord):
    """Macronutrients of a meal in grams."""

    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fats: float = Field(default=0, ge=0)


class Meal(FrozenRecord):
    """A single meal; every field is present after normalization."""

    name: str = Field(default="", description="Meal name")
    time: str = Field(default="", description="Meal time as HH:MM text")
    recipe: str = Field(default="", description="Ingredients with quantities")
    calories: float = Field(default=0, ge=0, description="Energy in kcal")
    macros: MealMacros = Field(default_factory=MealMacros)


class DayPlan(FrozenRecord):
    """Meals for one day."""

    breakfast: Meal = Field(default_factory=Meal)
    lunch: Meal = Field(default_factory=Meal)
    dinner: Meal = Field(default_factory=Meal)
    snacks: List[Meal] = Field(default_factory=list)

    def meals(self) -> List[Meal]:
        """All meals of the day in serving order."""
        return [self.breakfast, self.lunch, self.dinner, *self.snacks]


class MealPlan(FrozenRecord):
    """Weekly meal plan for both tiers, keyed by lowercase day token."""

    affordable: Dict[str, DayPlan] = Field(default_factory=dict)
    premium: Dict[str, DayPlan] = Field(default_factory=dict)

    def tier(self, tier: PlanTier) -> Dict[str, DayPlan]:
        return self.premium if tier == "premium" else self.affordable


# ============================================================================
# Grocery lists
# ============================================================================


class GroceryItem(FrozenRecord):
    """One grocery line; duplicates across lines are tolerated."""

    item: str = Field(..., description="Ingredient name")
    quantity: float = Field(default=0, ge=0)
    unit: str = Field(default="unit")
    price: float = Field(default=0, ge=0, description="Model-estimated price")
    notes: str = Field(default="")


class GroceryList(FrozenRecord):
    """Normalized GROCERY_LIST response."""

    items: List[GroceryItem] = Field(default_factory=list)


# ============================================================================
# Workout plans
# ============================================================================


class WorkoutExercise(FrozenRecord):
    """Single exercise prescription."""

    name: str = Field(default="")
    sets: int = Field(default=0, ge=0)
    reps: int = Field(default=0, ge=0)
    rest: float = Field(default=0, ge=0, description="Rest between sets in seconds")
    notes: str = Field(default="")


class DayWorkout(FrozenRecord):
    """Workout for one day of the week."""

    day: str = Field(default="")
    focus: str = Field(default="")
    exercises: List[WorkoutExercise] = Field(default_factory=list)


class WorkoutPlan(FrozenRecord):
    """Normalized WORKOUT_PLAN response (seven days expected)."""

    days: List[DayWorkout] = Field(default_factory=list)


# ============================================================================
# Multi-step generation output
# ============================================================================


class PlanGenerationResult(BaseModel):
    """Outcome of a full generation run; earlier steps survive later failures."""

    macro_targets: List[MacroTarget] = Field(default_factory=list)
    meal_plan: Optional[MealPlan] = None
    grocery_lists: Dict[str, List[GroceryItem]] = Field(default_factory=dict)
    workout_plan: List[DayWorkout] = Field(default_factory=list)
    completed_steps: List[str] = Field(default_factory=list)
    errors: Dict[str, str] = Field(
        default_factory=dict,
        description="Generic, user-facing failure message per failed step",
    )

    @property
    def succeeded(self) -> bool:
        return not self.errors
