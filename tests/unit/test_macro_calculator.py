"""Unit tests for per-meal macro distribution."""
import pytest

from macro_calculator import (
    DEFAULT_DAILY_MACROS,
    MEAL_MACRO_DISTRIBUTION,
    distribute_macros,
    find_macro_amount,
    protein_shortfalls,
    resolve_daily_macros,
    sum_day_macros,
)
from schemas import DayPlan, MacroTarget, Meal, MealMacros


def _meal(protein, calories=400):
    return Meal(name="m", calories=calories, macros=MealMacros(protein=protein, carbs=10, fats=5))


@pytest.mark.priority_high
@pytest.mark.unit
class TestMacroResolution:

    def test_distribution_sums_to_one(self):
        assert sum(MEAL_MACRO_DISTRIBUTION.values()) == pytest.approx(1.0)

    def test_matches_nutrient_aliases(self, sample_macro_targets):
        assert find_macro_amount(sample_macro_targets, "carbs") == 220
        assert find_macro_amount(sample_macro_targets, "protein") == 160

    def test_zero_amount_counts_as_missing(self):
        targets = [MacroTarget(nutrient="Fat", amount=0)]
        assert find_macro_amount(targets, "fats") is None

    def test_defaults_for_missing_nutrients(self):
        targets = [MacroTarget(nutrient=" Protein ", amount=180)]
        resolved = resolve_daily_macros(targets)

        assert resolved["protein"] == 180
        assert resolved["carbs"] == DEFAULT_DAILY_MACROS["carbs"]
        assert resolved["fats"] == DEFAULT_DAILY_MACROS["fats"]

    def test_distribute_rounds_to_whole_grams(self):
        per_meal = distribute_macros({"protein": 160, "carbs": 200, "fats": 60})

        assert per_meal["breakfast"] == {"protein": 40, "carbs": 50, "fats": 15}
        assert per_meal["lunch"] == {"protein": 56, "carbs": 70, "fats": 21}
        assert per_meal["snack"]["protein"] == 16

    def test_distribution_from_macro_targets(self, sample_macro_targets):
        per_meal = distribute_macros(resolve_daily_macros(sample_macro_targets))
        assert per_meal["dinner"] == {"protein": 48, "carbs": 66, "fats": 21}


@pytest.mark.priority_medium
@pytest.mark.unit
class TestDayTotals:

    def test_sum_includes_snacks(self):
        plan = DayPlan(breakfast=_meal(30), lunch=_meal(50), dinner=_meal(40), snacks=[_meal(20, 150)])
        totals = sum_day_macros(plan)

        assert totals["protein"] == 140
        assert totals["calories"] == 1350
        assert totals["fats"] == 20

    def test_protein_shortfalls(self):
        days = {
            "monday": DayPlan(breakfast=_meal(50), lunch=_meal(60), dinner=_meal(50)),
            "tuesday": DayPlan(breakfast=_meal(20), lunch=_meal(30), dinner=_meal(30)),
        }
        assert protein_shortfalls(days, daily_protein=160) == ["tuesday"]
