"""On-demand regeneration of a single (tier, day) plan."""
from __future__ import annotations

from typing import Sequence

from ai_pipeline import AIRequestPipeline
from prompts import create_day_plan_prompt
from schemas import DayPlan, MacroTarget, PersonalData, PlanTier, ResponseCategory
from validation_config import DAY_TOKENS, PLAN_TIERS, normalize_day_token


async def generate_day_plan(
    pipeline: AIRequestPipeline,
    profile: PersonalData,
    tdee: float,
    macro_targets: Sequence[MacroTarget],
    tier: PlanTier,
    day: str,
) -> DayPlan:
    """
    Generate one day for one tier without refetching the whole week.

    Args:
        pipeline: Request pipeline
        profile: Caller's personal data
        tdee: Daily calorie target in kcal
        macro_targets: Daily macro targets from generate_macro_targets
        tier: "affordable" or "premium"
        day: Day name, any case ("Monday", "monday")

    Returns:
        Normalized DayPlan

    Raises:
        ValueError: unknown tier or day
        ExhaustedRetriesError: the request failed
    """
    if tier not in PLAN_TIERS:
        raise ValueError(f"Unknown plan tier '{tier}' (expected one of: {', '.join(PLAN_TIERS)})")
    day_token = normalize_day_token(day)
    if day_token not in DAY_TOKENS:
        raise ValueError(f"Unknown day '{day}' (expected one of: {', '.join(DAY_TOKENS)})")

    return await pipeline.execute(
        create_day_plan_prompt(profile, tdee, macro_targets, tier, day_token),
        ResponseCategory.SINGLE_DAY_PLAN,
    )
