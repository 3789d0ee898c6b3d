"""Prompt for the weekly grocery list of one tier."""
from __future__ import annotations

import json
from typing import Dict

from schemas import DayPlan


def create_grocery_list_prompt(week: Dict[str, DayPlan]) -> str:
    """
    Build the GROCERY_LIST prompt.

    Args:
        week: Day token -> DayPlan for the selected tier

    Returns:
        Prompt text with the week's meals serialized as context
    """
    week_json = json.dumps({day: plan.model_dump() for day, plan in week.items()})

    return f"""
    Generate a complete grocery list for this weekly meal plan:
    {week_json}

    Return a JSON object with this EXACT structure:
    {{
      "groceryList": [
        {{
          "item": "string",
          "quantity": number,
          "unit": "string",
          "price": number,
          "notes": "string"
        }}
      ]
    }}

    Important:
    1. Every item MUST have all fields (item, quantity, unit, price, notes)
    2. Include ALL ingredients needed for the entire week
    3. Use Pakistani market prices in PKR
    4. Consolidate duplicate ingredients and sum their quantities
    5. Ensure the JSON is complete and properly closed
    """
