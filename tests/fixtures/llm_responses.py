"""Raw LLM completions used across the test suite.

Clean payloads are built with json.dumps; malformed ones are written by hand
to reproduce what models actually return.
"""
import json

DAYS_FIRST_BATCH = ["monday", "tuesday", "wednesday", "thursday"]
DAYS_SECOND_BATCH = ["friday", "saturday", "sunday"]


def meal(name, time="08:00", calories=500, protein=40, carbs=50, fats=15):
    return {
        "name": name,
        "time": time,
        "recipe": f"200g grilled chicken breast, 1 cup brown rice ({name})",
        "calories": calories,
        "macros": {"protein": protein, "carbs": carbs, "fats": fats},
    }


def day_plan(label, protein=40):
    return {
        "breakfast": meal(f"{label} oats", "08:00", 450, protein, 60, 12),
        "lunch": meal(f"{label} chicken bowl", "13:00", 650, protein, 70, 18),
        "dinner": meal(f"{label} grilled fish", "19:30", 600, protein, 50, 20),
        "snacks": [meal(f"{label} greek yogurt", "16:00", 200, 20, 15, 5)],
    }


def meal_batch_response(days, premium=True):
    plan = {"affordable": {day: day_plan(f"budget {day}") for day in days}}
    if premium:
        plan["premium"] = {day: day_plan(f"premium {day}") for day in days}
    return json.dumps({"mealPlan": plan})


MACRO_TARGETS_CLEAN = json.dumps(
    {
        "macroTargets": [
            {"nutrient": "protein", "amount": 160, "details": "2g per kg bodyweight"},
            {"nutrient": "carbohydrates", "amount": 220, "details": "Fuel for training"},
            {"nutrient": "fats", "amount": 70, "details": "Hormonal health"},
        ]
    }
)

# Doubled outer braces
MACRO_TARGETS_DOUBLED_BRACES = (
    '{{"macroTargets": [{"nutrient":"protein","amount":150,"details":"x"}]}}'
)

MACRO_TARGETS_WITH_PROSE = """Sure! Here are your targets:
```json
{
  "macroTargets": [
    {"nutrient": "protein", "amount": 160g, "details": "High protein for muscle gain"},  // key macro
    {"nutrient": "carbohydrates", "amount": 220, "details": "See https://example.com/carbs"},
    {"nutrient": "fats", "amount": 70, "details": "Healthy fats"},
  ]
}
```
Note: adjust these targets every 4 weeks."""

# Bare keys and a trailing comma
MACRO_TARGETS_BARE_KEYS = """{
  macroTargets: [
    {nutrient: "protein", amount: 150, details: "Keep it high",}
  ]
}"""

# Elements lost their closing braces
MACRO_TARGETS_UNCLOSED_ELEMENTS = (
    '{"macroTargets": [{"nutrient": "protein", "amount": 150, "details": "a", '
    '{"nutrient": "fats", "amount": 60, "details": "b"]}'
)

MEAL_BATCH_FIRST = meal_batch_response(DAYS_FIRST_BATCH)
MEAL_BATCH_SECOND = meal_batch_response(DAYS_SECOND_BATCH)

# Unquoted key, unit suffix, trailing comma, missing commas between meals,
# an empty dinner and a snack object that lost its closing brace
MEAL_BATCH_MALFORMED = """```json
{"mealPlan": {"affordable": {"monday": {
  "breakfast": {"name": "Egg white omelette", "time": "08:00", "recipe": "6 egg whites, 1 chapati", calories: 450, "macros": {"protein": 30g, "carbs": 40, "fats": 10},}
  "lunch": {"name": "Chicken rice", "time": "13:00", "recipe": "200g chicken, 1 cup rice", "calories": 650, "macros": {"protein": 55, "carbs": 70, "fats": 15}}
  "dinner": {}
  "snacks": [{"name": "Almonds", "time": "16:00", "recipe": "30g almonds", "calories": 180, "macros": {"protein": 6, "carbs": 6, "fats": 15}]
}}}}
```"""

# Response cut off in the middle of lunch
DAY_PLAN_TRUNCATED = (
    '{"dayPlan": {"breakfast": {"name": "Protein oats", "time": "07:30", '
    '"recipe": "80g oats, 1 scoop whey, 200ml milk", "calories": 520, '
    '"macros": {"protein": 42, "carbs": 60, "fats": 12}}, '
    '"lunch": {"name": "Grilled chicken wr'
)

DAY_PLAN_CLEAN = json.dumps({"dayPlan": day_plan("switched")})

GROCERY_LIST_CLEAN = json.dumps(
    {
        "groceryList": [
            {"item": " Chicken breast ", "quantity": 2, "unit": "kg", "price": 2400, "notes": "Boneless"},
            {"item": "Brown rice", "quantity": 5, "unit": "kg", "price": 1750, "notes": ""},
            {"item": "Eggs", "quantity": 30, "unit": "piece", "price": 900, "notes": "Free range"},
        ]
    }
)

# Unquoted unit suffixes on numbers; validated after sanitizing
GROCERY_LIST_WITH_UNITS = (
    '{"groceryList": [{"item": "Rice", "quantity": 5kg, "unit": "kg", "price": 350, "notes": ""} '
    '{"item": "Milk", "quantity": 2, "unit": "litre", "price": 400}]}'
)

# An item with an empty name is dropped by the grocery builder
GROCERY_LIST_WITH_BLANK_ITEM = json.dumps(
    {
        "groceryList": [
            {"item": "Oats", "quantity": 1, "unit": "kg", "price": 800, "notes": ""},
            {"item": "   ", "quantity": 1, "unit": "kg", "price": 100, "notes": ""},
        ]
    }
)

WORKOUT_DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

WORKOUT_PLAN_CLEAN = json.dumps(
    {
        "workoutPlan": [
            {
                "day": name,
                "focus": "Rest" if name == "Sunday" else "Strength",
                "exercises": []
                if name == "Sunday"
                else [
                    {"name": "Barbell squat", "sets": 4, "reps": 8, "rest": 120, "notes": "RPE 8"},
                    {"name": "Bench press", "sets": 3, "reps": 10, "rest": 90, "notes": ""},
                ],
            }
            for name in WORKOUT_DAY_NAMES
        ]
    }
)

WORKOUT_PLAN_SHORT = json.dumps(
    {
        "workoutPlan": [
            {"day": "Monday", "focus": "Full body", "exercises": [
                {"name": "Deadlift", "sets": "3", "reps": "8-12", "rest": 90, "notes": ""}
            ]},
        ]
    }
)

PROSE_ONLY = "I'm sorry, I can't help with that request right now."

WRONG_SHAPE = json.dumps({"result": "ok", "items": []})
