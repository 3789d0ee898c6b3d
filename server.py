"""HTTP server exposing fitness plan generation as REST APIs."""

from __future__ import annotations

import sys
from functools import lru_cache
from typing import Any, Dict, List

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from builders import generate_grocery_list, generate_macro_targets, generate_meal_plans, generate_workout_plan
from exceptions import ExhaustedRetriesError, ProviderConfigurationError
from fitness_planner import STEP_ERROR_MESSAGES, FitnessPlanner
from schemas import MacroTarget, MealPlan, PersonalData, PlanTier

app = FastAPI(
    title="Fitness Plan Generator",
    description="LLM-backed macro targets, meal plans, grocery lists and workout plans",
)


@lru_cache(maxsize=1)
def get_planner() -> FitnessPlanner:
    """Planner shared by all requests; built on first use from process configuration."""
    return FitnessPlanner.from_settings()


class ProfileRequest(BaseModel):
    """Personal data plus the caller-computed TDEE."""

    profile: PersonalData
    tdee: float = Field(..., gt=0, description="Total daily energy expenditure in kcal")


class MealPlanRequest(ProfileRequest):
    macro_targets: List[MacroTarget] = Field(default_factory=list)


class DayPlanRequest(MealPlanRequest):
    tier: str = Field(..., description="Plan tier: affordable or premium")
    day: str = Field(..., description="Day of the week, e.g. monday")


class GroceryListRequest(BaseModel):
    meal_plan: MealPlan
    tier: str = Field(default="affordable", description="Plan tier: affordable or premium")


def _step_failed(step: str, exc: ExhaustedRetriesError) -> HTTPException:
    print(f"\n❌ Error while generating {step}: {exc}\n", file=sys.stderr)
    return HTTPException(status_code=502, detail=STEP_ERROR_MESSAGES[step])


def _dump(records: List[BaseModel]) -> List[Dict[str, Any]]:
    return [record.model_dump() for record in records]


@app.exception_handler(ProviderConfigurationError)
async def provider_configuration_error(request: Request, exc: ProviderConfigurationError) -> JSONResponse:
    print(f"\n❌ Provider misconfigured: {exc}\n", file=sys.stderr)
    return JSONResponse(status_code=503, content={"detail": "AI provider is not configured"})


@app.get("/health")
async def healthcheck() -> Dict[str, str]:
    """Simple readiness probe."""
    return {"status": "ok"}


@app.post("/plan")
async def generate_plan(
    request_body: ProfileRequest, planner: FitnessPlanner = Depends(get_planner)
) -> JSONResponse:
    """
    Run every generation step (macros, meals, groceries, workout).

    Partial results are returned with HTTP 200; `errors` names the step that
    failed.
    """
    print(f"\n🏋️  Generating plan for goal={request_body.profile.goal}\n", file=sys.stderr)
    result = await planner.generate_plan(request_body.profile, request_body.tdee)
    return JSONResponse(content=result.model_dump(mode="json"))


@app.post("/macro-targets")
async def macro_targets(
    request_body: ProfileRequest, planner: FitnessPlanner = Depends(get_planner)
) -> Dict[str, Any]:
    try:
        targets = await generate_macro_targets(
            planner.pipeline, request_body.profile, request_body.tdee
        )
    except ExhaustedRetriesError as exc:
        raise _step_failed("macro_targets", exc) from exc
    return {"macroTargets": _dump(targets)}


@app.post("/meal-plan")
async def meal_plan(
    request_body: MealPlanRequest, planner: FitnessPlanner = Depends(get_planner)
) -> Dict[str, Any]:
    try:
        plan = await generate_meal_plans(
            planner.pipeline,
            request_body.profile,
            request_body.tdee,
            request_body.macro_targets,
        )
    except ExhaustedRetriesError as exc:
        raise _step_failed("meal_plan", exc) from exc
    return {"mealPlan": plan.model_dump()}


@app.post("/day-plan")
async def day_plan(
    request_body: DayPlanRequest, planner: FitnessPlanner = Depends(get_planner)
) -> Dict[str, Any]:
    """Regenerate one day of one tier."""
    try:
        plan = await planner.switch_day_plan(
            request_body.profile,
            request_body.tdee,
            request_body.macro_targets,
            request_body.tier,
            request_body.day,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ExhaustedRetriesError as exc:
        raise _step_failed("day_plan", exc) from exc
    return {"dayPlan": plan.model_dump()}


@app.post("/grocery-list")
async def grocery_list(
    request_body: GroceryListRequest, planner: FitnessPlanner = Depends(get_planner)
) -> Dict[str, Any]:
    tier: PlanTier = request_body.tier  # type: ignore[assignment]
    try:
        items = await generate_grocery_list(planner.pipeline, request_body.meal_plan, tier)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ExhaustedRetriesError as exc:
        raise _step_failed("grocery_lists", exc) from exc
    return {"groceryList": _dump(items)}


@app.post("/workout-plan")
async def workout_plan(
    request_body: ProfileRequest, planner: FitnessPlanner = Depends(get_planner)
) -> Dict[str, Any]:
    try:
        days = await generate_workout_plan(planner.pipeline, request_body.profile)
    except ExhaustedRetriesError as exc:
        raise _step_failed("workout_plan", exc) from exc
    return {"workoutPlan": _dump(days)}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server:app", host="0.0.0.0", port=8000, reload=False)
