"""Prompt for daily macro targets."""
from __future__ import annotations

import json

from schemas import PersonalData


def create_macro_targets_prompt(profile: PersonalData, tdee: float) -> str:
    """
    Build the MACRO_SET prompt.

    Args:
        profile: Caller's personal data (weight and goal are used)
        tdee: Total daily energy expenditure in kcal, computed by the caller

    Returns:
        Prompt text (without the JSON instruction block)
    """
    parameters = json.dumps(
        {"weight": profile.weight, "goal": profile.goal, "tdee": round(tdee)},
        indent=2,
    )

    return f"""
    Generate macro targets based on these parameters:
    {parameters}

    Return a JSON object with this structure:
    {{
      "macroTargets": [
        {{
          "nutrient": "protein",
          "amount": number,
          "details": "string"
        }},
        {{
          "nutrient": "carbohydrates",
          "amount": number,
          "details": "string"
        }},
        {{
          "nutrient": "fats",
          "amount": number,
          "details": "string"
        }}
      ]
    }}

    Amounts are daily grams, written as plain numbers without units.
    """
