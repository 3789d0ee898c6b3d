"""Prompt for one batch of the weekly meal plan (both tiers)."""
from __future__ import annotations

from typing import Dict, Sequence

from schemas import PersonalData

PROTEIN_PORTIONS = (
    "200g chicken breast = 62g protein",
    "4 whole eggs = 24g protein",
    "6 egg whites = 22g protein",
    "200g fish/salmon = 40g protein",
    "200g lean beef = 52g protein",
    "100g paneer = 18g protein",
    "1 cup daal = 18g protein",
    "200g Greek yogurt = 20g protein",
)


def _format_meal_targets(meal_targets: Dict[str, Dict[str, int]]) -> str:
    lines = []
    for meal, macros in meal_targets.items():
        lines.append(
            f"    - {meal.capitalize()}: {macros['protein']}g protein, "
            f"{macros['carbs']}g carbs, {macros['fats']}g fats"
        )
    return "\n".join(lines)


def _meal_example(macros: Dict[str, int]) -> str:
    return (
        '{ "name": "Fitness meal name", "time": "HH:MM", '
        '"recipe": "Detailed ingredients with quantities", "calories": number, '
        f'"macros": {{ "protein": {macros["protein"]}, "carbs": {macros["carbs"]}, '
        f'"fats": {macros["fats"]} }} }}'
    )


def create_meal_plan_batch_prompt(
    profile: PersonalData,
    tdee: float,
    daily_macros: Dict[str, float],
    meal_targets: Dict[str, Dict[str, int]],
    days: Sequence[str],
) -> str:
    """
    Build the MEAL_BATCH prompt for a subset of the week.

    Args:
        profile: Caller's personal data
        tdee: Daily calorie target in kcal
        daily_macros: Daily protein/carbs/fats targets in grams
        meal_targets: Per-meal macro targets (see macro_calculator.distribute_macros)
        days: Lowercase day tokens to generate, e.g. ("monday", "tuesday")

    Returns:
        Prompt text asking for both the affordable and the premium tier
    """
    day_list = ", ".join(days)
    first_day = days[0]
    portions = "\n".join(f"    - {portion}" for portion in PROTEIN_PORTIONS)
    day_example = (
        "{\n"
        f'            "breakfast": {_meal_example(meal_targets["breakfast"])},\n'
        f'            "lunch": {_meal_example(meal_targets["lunch"])},\n'
        f'            "dinner": {_meal_example(meal_targets["dinner"])},\n'
        f'            "snacks": [{_meal_example(meal_targets["snack"])}]\n'
        "          }"
    )

    return f"""
    You are a Pakistani FITNESS COACH. Generate a PRECISE macro-matched meal plan for: {day_list}

    STRICT DAILY TARGETS (MUST BE MET EXACTLY):
    - Total Calories: {round(tdee)} kcal
    - Total Protein: {round(daily_macros['protein'])}g (THIS IS CRITICAL - DO NOT GO BELOW)
    - Total Carbs: {round(daily_macros['carbs'])}g
    - Total Fats: {round(daily_macros['fats'])}g
    - Goal: {profile.goal}

    PER-MEAL MACRO TARGETS (follow these closely):
{_format_meal_targets(meal_targets)}

    Return a JSON object with this EXACT structure:
    {{
      "mealPlan": {{
        "affordable": {{
          "{first_day}": {day_example}
        }},
        "premium": {{
          "{first_day}": {{ same structure as affordable }}
        }}
      }}
    }}

    HIGH PROTEIN FOOD PORTIONS TO HIT TARGETS:
{portions}

    FITNESS MEAL REQUIREMENTS:
    1. GRILLED/BAKED/BOILED proteins - NO frying
    2. Use large protein portions to hit {round(daily_macros['protein'])}g daily protein
    3. Carbs: Brown rice, oats, whole wheat chapati, sweet potato
    4. RECIPE FORMAT: "200g grilled chicken breast, 1.5 cups brown rice, 100g steamed broccoli, 1 tsp olive oil"
    5. Affordable tier: regular chicken, eggs, brown rice, local fish
    6. Premium tier: olive oil, salmon, quinoa, grass-fed beef

    CRITICAL:
    - Include ONLY these days in BOTH tiers: {day_list}
    - Each day's meals MUST add up to the daily targets above
    - All numeric values without units
    """
