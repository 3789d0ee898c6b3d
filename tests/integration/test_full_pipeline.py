"""Integration tests for the complete plan generation workflow."""
import pytest
from fastapi.testclient import TestClient

from exceptions import ProviderConfigurationError
from fitness_planner import STEP_ERROR_MESSAGES, FitnessPlanner
from server import app, get_planner
from tests.conftest import prompt_router
from tests.fixtures.llm_responses import (
    DAY_PLAN_CLEAN,
    GROCERY_LIST_CLEAN,
    MACRO_TARGETS_CLEAN,
    MEAL_BATCH_FIRST,
    MEAL_BATCH_SECOND,
    PROSE_ONLY,
    WORKOUT_PLAN_CLEAN,
)
from validation_config import DAY_TOKENS


def _routes(**overrides):
    responses = {
        "grocery": GROCERY_LIST_CLEAN,
        "workout": WORKOUT_PLAN_CLEAN,
        "day": DAY_PLAN_CLEAN,
        "first_batch": MEAL_BATCH_FIRST,
        "second_batch": MEAL_BATCH_SECOND,
        "macros": MACRO_TARGETS_CLEAN,
    }
    responses.update(overrides)
    return prompt_router(
        [
            ('"groceryList"', responses["grocery"]),
            ('"workoutPlan"', responses["workout"]),
            ('"dayPlan"', responses["day"]),
            ("BOTH tiers: monday", responses["first_batch"]),
            ("BOTH tiers: friday", responses["second_batch"]),
            ('"macroTargets"', responses["macros"]),
        ],
        PROSE_ONLY,
    )


@pytest.fixture
def planner_factory(make_pipeline):
    def _make(**overrides):
        pipeline, gateway = make_pipeline(_routes(**overrides))
        return FitnessPlanner(pipeline), gateway

    return _make


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _body(profile, **extra):
    return {"profile": profile.model_dump(), "tdee": 2800, **extra}


@pytest.mark.priority_medium
@pytest.mark.integration
class TestFullPipeline:
    """Macro targets -> meal plans -> grocery lists -> workout plan."""

    @pytest.mark.asyncio
    @pytest.mark.timeout(30)
    async def test_complete_workflow(self, planner_factory, sample_profile):
        planner, gateway = planner_factory()

        result = await planner.generate_plan(sample_profile, 2800)

        assert result.succeeded
        assert result.completed_steps == ["macro_targets", "meal_plan", "grocery_lists", "workout_plan"]
        assert [t.amount for t in result.macro_targets] == [160, 220, 70]
        assert list(result.meal_plan.affordable) == list(DAY_TOKENS)
        assert set(result.meal_plan.premium) == set(DAY_TOKENS)
        assert set(result.grocery_lists) == {"affordable", "premium"}
        assert result.grocery_lists["affordable"][0].item == "Chicken breast"
        assert len(result.workout_plan) == 7
        # 1 macro + 2 meal batches + 2 grocery lists + 1 workout
        assert gateway.calls == 6

    @pytest.mark.asyncio
    @pytest.mark.timeout(30)
    async def test_failed_step_keeps_earlier_results(self, planner_factory, sample_profile):
        planner, gateway = planner_factory(workout=PROSE_ONLY)

        result = await planner.generate_plan(sample_profile, 2800)

        assert not result.succeeded
        assert result.errors == {"workout_plan": STEP_ERROR_MESSAGES["workout_plan"]}
        assert result.completed_steps == ["macro_targets", "meal_plan", "grocery_lists"]
        assert result.meal_plan is not None
        assert result.workout_plan == []
        # Workout request retried twice after the first failure
        assert gateway.calls == 8

    @pytest.mark.asyncio
    @pytest.mark.timeout(30)
    async def test_first_step_failure_stops_the_run(self, planner_factory, sample_profile):
        planner, gateway = planner_factory(macros=PROSE_ONLY)

        result = await planner.generate_plan(sample_profile, 2800)

        assert result.errors == {"macro_targets": STEP_ERROR_MESSAGES["macro_targets"]}
        assert result.completed_steps == []
        assert result.meal_plan is None
        assert gateway.calls == 3

    @pytest.mark.asyncio
    @pytest.mark.timeout(30)
    async def test_switch_day_plan(self, planner_factory, sample_profile, sample_macro_targets):
        planner, _ = planner_factory()

        plan = await planner.switch_day_plan(sample_profile, 2800, sample_macro_targets, "affordable", "friday")

        assert plan.lunch.name == "switched chicken bowl"


@pytest.mark.priority_medium
@pytest.mark.integration
class TestServer:
    """REST surface over the planner."""

    @pytest.mark.timeout(30)
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    @pytest.mark.timeout(30)
    def test_plan_endpoint(self, client, planner_factory, sample_profile):
        planner, _ = planner_factory()
        app.dependency_overrides[get_planner] = lambda: planner

        response = client.post("/plan", json=_body(sample_profile))

        assert response.status_code == 200
        body = response.json()
        assert body["errors"] == {}
        assert body["meal_plan"]["premium"]["sunday"]["breakfast"]["name"] == "premium sunday oats"

    @pytest.mark.timeout(30)
    def test_plan_endpoint_reports_partial_failure(self, client, planner_factory, sample_profile):
        planner, _ = planner_factory(grocery=PROSE_ONLY)
        app.dependency_overrides[get_planner] = lambda: planner

        body = client.post("/plan", json=_body(sample_profile)).json()

        assert body["errors"] == {"grocery_lists": STEP_ERROR_MESSAGES["grocery_lists"]}
        assert body["completed_steps"] == ["macro_targets", "meal_plan"]

    @pytest.mark.timeout(30)
    def test_invalid_profile_is_rejected(self, client, planner_factory, sample_profile):
        planner, gateway = planner_factory()
        app.dependency_overrides[get_planner] = lambda: planner

        response = client.post("/plan", json={"profile": sample_profile.model_dump(), "tdee": 0})

        assert response.status_code == 422
        assert gateway.calls == 0

    @pytest.mark.timeout(30)
    def test_macro_targets_endpoint(self, client, planner_factory, sample_profile):
        planner, _ = planner_factory()
        app.dependency_overrides[get_planner] = lambda: planner

        body = client.post("/macro-targets", json=_body(sample_profile)).json()

        assert body["macroTargets"][0]["nutrient"] == "protein"

    @pytest.mark.timeout(30)
    def test_step_failure_returns_generic_message(self, client, planner_factory, sample_profile):
        planner, _ = planner_factory(workout=PROSE_ONLY)
        app.dependency_overrides[get_planner] = lambda: planner

        response = client.post("/workout-plan", json=_body(sample_profile))

        assert response.status_code == 502
        assert response.json() == {"detail": STEP_ERROR_MESSAGES["workout_plan"]}

    @pytest.mark.timeout(30)
    def test_day_plan_rejects_unknown_tier(self, client, planner_factory, sample_profile):
        planner, _ = planner_factory()
        app.dependency_overrides[get_planner] = lambda: planner

        response = client.post("/day-plan", json=_body(sample_profile, tier="gold", day="monday"))

        assert response.status_code == 400

    @pytest.mark.timeout(30)
    def test_day_plan_endpoint(self, client, planner_factory, sample_profile):
        planner, _ = planner_factory()
        app.dependency_overrides[get_planner] = lambda: planner

        response = client.post("/day-plan", json=_body(sample_profile, tier="premium", day="Sunday"))

        assert response.status_code == 200
        assert response.json()["dayPlan"]["dinner"]["name"] == "switched grilled fish"

    @pytest.mark.timeout(30)
    def test_missing_provider_configuration(self, client, sample_profile):
        def unconfigured():
            raise ProviderConfigurationError("GOOGLE_API_KEY is not set", provider="gemini")

        app.dependency_overrides[get_planner] = unconfigured

        response = client.post("/macro-targets", json=_body(sample_profile))

        assert response.status_code == 503
        assert response.json() == {"detail": "AI provider is not configured"}
