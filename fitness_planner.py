"""Multi-step fitness plan generation.

Runs the builders in order (macro targets -> meal plans -> grocery lists ->
workout plan). A step whose request exhausts its retries records one generic
message and stops the run; results of earlier steps are kept.
"""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from ai_pipeline import AIRequestPipeline
from builders import (
    generate_day_plan,
    generate_grocery_list,
    generate_macro_targets,
    generate_meal_plans,
    generate_workout_plan,
)
from exceptions import ExhaustedRetriesError
from observability import log_workflow, setup_structured_logger
from retry_utils import RetryPolicy
from schemas import DayPlan, MacroTarget, PersonalData, PlanGenerationResult, PlanTier
from validation_config import PLAN_TIERS

logger = setup_structured_logger("fitplan.planner")

# User-facing messages; details go to the structured log only
STEP_ERROR_MESSAGES = {
    "macro_targets": "Could not generate macro targets. Please try again.",
    "meal_plan": "Could not generate the meal plan. Please try again.",
    "grocery_lists": "Could not generate the grocery list. Please try again.",
    "workout_plan": "Could not generate the workout plan. Please try again.",
    "day_plan": "Could not generate this day's meals. Please try again.",
}


class FitnessPlanner:
    """Caller-facing facade over the domain builders."""

    def __init__(self, pipeline: AIRequestPipeline):
        self.pipeline = pipeline

    @classmethod
    def from_settings(cls, retry_policy: Optional[RetryPolicy] = None) -> "FitnessPlanner":
        """Wire gateway and pipeline from process configuration."""
        return cls(AIRequestPipeline.from_settings(retry_policy=retry_policy))

    async def generate_plan(self, profile: PersonalData, tdee: float) -> PlanGenerationResult:
        """
        Generate the full plan for a profile.

        Args:
            profile: Caller's personal data
            tdee: Daily calorie target in kcal (computed by the caller)

        Returns:
            PlanGenerationResult; `errors` maps the failed step (if any) to a
            generic message and `completed_steps` lists the steps that succeeded
        """
        result = PlanGenerationResult()
        print(f"\n🏋️  Generating fitness plan (goal={profile.goal}, tdee={round(tdee)})\n", file=sys.stderr)

        try:
            with log_workflow(logger, "macro_targets", goal=profile.goal):
                result.macro_targets = await generate_macro_targets(self.pipeline, profile, tdee)
            result.completed_steps.append("macro_targets")

            with log_workflow(logger, "meal_plan"):
                result.meal_plan = await generate_meal_plans(
                    self.pipeline, profile, tdee, result.macro_targets
                )
            result.completed_steps.append("meal_plan")

            for tier in PLAN_TIERS:
                with log_workflow(logger, "grocery_list", tier=tier):
                    result.grocery_lists[tier] = await generate_grocery_list(
                        self.pipeline, result.meal_plan, tier
                    )
            result.completed_steps.append("grocery_lists")

            with log_workflow(logger, "workout_plan"):
                result.workout_plan = await generate_workout_plan(self.pipeline, profile)
            result.completed_steps.append("workout_plan")

        except ExhaustedRetriesError as exc:
            step = self._failed_step(result)
            result.errors[step] = STEP_ERROR_MESSAGES[step]
            print(f"\n❌ {step}: {exc}\n", file=sys.stderr)
            return result

        print(f"\n✅ Fitness plan complete ({', '.join(result.completed_steps)})\n", file=sys.stderr)
        return result

    @staticmethod
    def _failed_step(result: PlanGenerationResult) -> str:
        for step in ("macro_targets", "meal_plan", "grocery_lists", "workout_plan"):
            if step not in result.completed_steps:
                return step
        return "workout_plan"

    async def switch_day_plan(
        self,
        profile: PersonalData,
        tdee: float,
        macro_targets: Sequence[MacroTarget],
        tier: PlanTier,
        day: str,
    ) -> DayPlan:
        """Regenerate one (tier, day) pair.

        Raises:
            ValueError: unknown tier or day
            ExhaustedRetriesError: the request failed
        """
        with log_workflow(logger, "day_plan", tier=tier, day=day):
            return await generate_day_plan(self.pipeline, profile, tdee, macro_targets, tier, day)
