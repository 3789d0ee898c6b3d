"""Prompt for a single day of one tier."""
from __future__ import annotations

import json
from typing import Sequence

from schemas import MacroTarget, PersonalData, PlanTier

TIER_GUIDANCE = {
    "affordable": "Budget: Use regular chicken, eggs, brown rice, local fish",
    "premium": "Premium: Use olive oil, salmon, quinoa, grass-fed beef",
}


def create_day_plan_prompt(
    profile: PersonalData,
    tdee: float,
    macro_targets: Sequence[MacroTarget],
    tier: PlanTier,
    day: str,
) -> str:
    """Build the SINGLE_DAY_PLAN prompt used to regenerate one (tier, day) pair."""
    targets_json = json.dumps([target.model_dump() for target in macro_targets])

    return f"""
    You are a Pakistani FITNESS COACH and bodybuilder nutritionist. Generate a CLEAN EATING meal plan for {day}.

    User Profile:
    - Daily Calories: {round(tdee)} kcal
    - Goal: {profile.goal}
    - Plan Type: {tier}
    - Target Macros: {targets_json}

    Return a JSON object with this structure:
    {{
      "dayPlan": {{
        "breakfast": {{
          "name": "Fitness meal name",
          "time": "HH:MM",
          "recipe": "Detailed ingredients with quantities",
          "calories": number,
          "macros": {{ "protein": number, "carbs": number, "fats": number }}
        }},
        "lunch": {{ same structure }},
        "dinner": {{ same structure }},
        "snacks": [{{ same structure }}]
      }}
    }}

    FITNESS MEAL REQUIREMENTS:
    1. GRILLED/BAKED/BOILED proteins - NO frying, minimal oil (1 tsp max)
    2. Prefer: Grilled chicken breast, egg whites, grilled fish, lean beef
    3. Carbs: Brown rice, oats, whole wheat chapati, sweet potato
    4. Fats: Olive oil, almonds, walnuts, peanut butter
    5. AVOID: Heavy curries, fried foods, ghee, white rice
    6. {TIER_GUIDANCE[tier]}

    RECIPE FORMAT: "150g grilled chicken, 1 cup brown rice, 100g steamed veggies, 1 tsp olive oil"

    CRITICAL:
    - HIGH PROTEIN in every meal (30-50g)
    - All numeric values without units
    """
