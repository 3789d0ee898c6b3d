"""Grocery list for one tier of the weekly meal plan."""
from __future__ import annotations

from typing import List

from ai_pipeline import AIRequestPipeline
from observability import setup_structured_logger
from prompts import create_grocery_list_prompt
from schemas import GroceryItem, MealPlan, PlanTier, ResponseCategory
from validation_config import PLAN_TIERS

logger = setup_structured_logger("fitplan.builders")


async def generate_grocery_list(
    pipeline: AIRequestPipeline, meal_plan: MealPlan, tier: PlanTier
) -> List[GroceryItem]:
    """
    Request the grocery list for the meals of `tier`.

    Items whose name is empty after trimming are dropped. Duplicates are kept
    and prices are the model's estimates.

    Raises:
        ValueError: unknown tier
        ExhaustedRetriesError: the request failed
    """
    if tier not in PLAN_TIERS:
        raise ValueError(f"Unknown plan tier '{tier}' (expected one of: {', '.join(PLAN_TIERS)})")

    result = await pipeline.execute(
        create_grocery_list_prompt(meal_plan.tier(tier)), ResponseCategory.GROCERY_LIST
    )

    items = [item for item in result.items if item.item]
    dropped = len(result.items) - len(items)
    if dropped:
        logger.info(
            f"Dropped {dropped} unnamed grocery items for {tier}",
            extra={"extra_fields": {"tier": tier, "dropped": dropped}},
        )
    return items
