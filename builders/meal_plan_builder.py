"""Weekly meal plans, generated in two concurrent batches."""
from __future__ import annotations

import asyncio
from typing import Dict, Iterable, Sequence

from ai_pipeline import AIRequestPipeline
from macro_calculator import distribute_macros, protein_shortfalls, resolve_daily_macros
from observability import setup_structured_logger
from prompts import create_meal_plan_batch_prompt
from schemas import DayPlan, MacroTarget, MealPlan, PersonalData, ResponseCategory
from validation_config import PLAN_TIERS, WEEK_BATCHES, check_week_coverage

logger = setup_structured_logger("fitplan.builders")


def merge_meal_batches(batches: Iterable[MealPlan]) -> MealPlan:
    """Union the day maps of each tier across batches.

    Tiers are merged independently; premium days are never filled from the
    affordable tier.
    """
    merged: Dict[str, Dict[str, DayPlan]] = {tier: {} for tier in PLAN_TIERS}
    for batch in batches:
        for tier in PLAN_TIERS:
            merged[tier].update(batch.tier(tier))
    return MealPlan(**merged)


async def generate_meal_plans(
    pipeline: AIRequestPipeline,
    profile: PersonalData,
    tdee: float,
    macro_targets: Sequence[MacroTarget],
) -> MealPlan:
    """
    Generate the seven-day plan for both tiers.

    The week is split into WEEK_BATCHES (monday-thursday, friday-sunday) so a
    single response never has to hold the whole week. Both batches run
    concurrently and are merged by day key. Missing days and days well below
    the protein target are logged; neither is an error.

    Raises:
        ExhaustedRetriesError: either batch failed
    """
    daily_macros = resolve_daily_macros(macro_targets)
    meal_targets = distribute_macros(daily_macros)

    batches = await asyncio.gather(
        *(
            pipeline.execute(
                create_meal_plan_batch_prompt(profile, tdee, daily_macros, meal_targets, days),
                ResponseCategory.MEAL_BATCH,
            )
            for days in WEEK_BATCHES
        )
    )
    meal_plan = merge_meal_batches(batches)

    for tier, missing in check_week_coverage(
        {tier: meal_plan.tier(tier) for tier in PLAN_TIERS}
    ).items():
        logger.warning(
            f"Missing days in {tier} meal plan: {', '.join(missing)}",
            extra={"extra_fields": {"tier": tier, "missing_days": missing}},
        )

    for tier in PLAN_TIERS:
        low_days = protein_shortfalls(meal_plan.tier(tier), daily_macros["protein"])
        if low_days:
            logger.info(
                f"{tier} days below protein target: {', '.join(low_days)}",
                extra={
                    "extra_fields": {
                        "tier": tier,
                        "days": low_days,
                        "daily_protein": daily_macros["protein"],
                    }
                },
            )

    return meal_plan
