"""JSON-only instruction block wrapped around every category prompt."""

BASE_PERSONA = "You are a fitness and nutrition expert. Provide your response as a valid JSON object."

JSON_RULES = (
    "Return ONLY the JSON object",
    "No additional text or comments",
    "No markdown code blocks",
    "No URLs or special characters",
    "Ensure all JSON is properly formatted",
    "Use simple text for all string values",
    "Always close all arrays and objects properly",
    "Include commas between all array elements and object properties",
)


def wrap_json_instructions(prompt_text: str) -> str:
    """Surround a category prompt with the persona line and numbered JSON rules."""
    rules = "\n".join(f"{index}. {rule}" for index, rule in enumerate(JSON_RULES, start=1))
    return f"{BASE_PERSONA}\n\n{prompt_text.strip()}\n\nImportant:\n{rules}"
