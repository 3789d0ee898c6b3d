"""Weekly workout plan."""
from __future__ import annotations

from typing import List

from ai_pipeline import AIRequestPipeline
from observability import setup_structured_logger
from prompts import create_workout_plan_prompt
from schemas import DayWorkout, PersonalData, ResponseCategory
from validation_config import WORKOUT_PLAN_DAYS

logger = setup_structured_logger("fitplan.builders")


async def generate_workout_plan(
    pipeline: AIRequestPipeline, profile: PersonalData
) -> List[DayWorkout]:
    """One WORKOUT_PLAN request; a plan that is not seven days long is logged, not rejected."""
    result = await pipeline.execute(
        create_workout_plan_prompt(profile), ResponseCategory.WORKOUT_PLAN
    )
    days = list(result.days)
    if len(days) != WORKOUT_PLAN_DAYS:
        logger.warning(
            f"Workout plan has {len(days)} days (expected {WORKOUT_PLAN_DAYS})",
            extra={"extra_fields": {"days": [day.day for day in days]}},
        )
    return days
