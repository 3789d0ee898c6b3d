"""Prompt for the seven-day workout plan."""
from __future__ import annotations

import json

from schemas import PersonalData
from validation_config import WORKOUT_PLAN_DAYS


def create_workout_plan_prompt(profile: PersonalData) -> str:
    parameters = json.dumps({"goal": profile.goal, "weight": profile.weight}, indent=2)

    return f"""
    Generate a {WORKOUT_PLAN_DAYS}-day workout plan for:
    {parameters}

    Return a JSON object with this structure:
    {{
      "workoutPlan": [
        {{
          "day": "string",
          "focus": "string",
          "exercises": [
            {{
              "name": "string",
              "sets": number,
              "reps": number,
              "rest": number,
              "notes": "string"
            }}
          ]
        }}
      ]
    }}

    Use one entry per day, Monday through Sunday; rest days have an empty exercises list.
    Rest is in seconds. Reps are a single number, not a range.
    """
