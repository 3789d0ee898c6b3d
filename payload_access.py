"""Total accessors for parsed LLM payloads.

Parsed JSON from a model can have any shape. Every read of a nested field goes
through these helpers, which never raise and fall back to a default.
"""

from typing import Any, Dict, List


def get_path(data: Any, *keys: str, default: Any = None) -> Any:
    """Follow `keys` through nested dicts, returning `default` on any miss."""
    current = data
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return default if current is None else current


def get_dict(data: Any, *keys: str) -> Dict[str, Any]:
    """Nested dict at `keys`, or an empty dict."""
    value = get_path(data, *keys)
    return value if isinstance(value, dict) else {}


def get_list(data: Any, *keys: str) -> List[Any]:
    """Nested list at `keys`, or an empty list."""
    value = get_path(data, *keys)
    return value if isinstance(value, list) else []


def is_number(value: Any) -> bool:
    """JSON number check (bool is not a number here)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_text(value: Any) -> bool:
    return isinstance(value, str)


def empty_meal_payload() -> Dict[str, Any]:
    """Placeholder for a meal slot the model left out."""
    return {
        "name": "",
        "time": "",
        "recipe": "",
        "calories": 0,
        "macros": {"protein": 0, "carbs": 0, "fats": 0},
    }
