"""Turns a loosely-shaped model response into a well-formed AnalysisOutcome.

Only the three top-level keys are mandatory. Everything below them is coerced:
confidences are clamped to [0, 1] (0.5 when unusable), portions fall back to
`low`, presence falls back to False and calorie values to 0.
"""

import json
import math
from typing import Any

from nutrition_tracker.analysis.exceptions import AnalysisResponseError
from nutrition_tracker.analysis.models import (
    AnalysisOutcome,
    CalorieInfo,
    CalorieRange,
    CategoryInfo,
    NutritionalCategories,
    Portion,
)

REQUIRED_KEYS: tuple[str, ...] = ("calories", "nutritionalCategories", "analysisNotes")
DEFAULT_CONFIDENCE = 0.5

# Response key -> NutritionalCategories attribute.
_CATEGORY_KEYS: dict[str, str] = {
    "vegetables": "vegetables",
    "fruits": "fruits",
    "proteins": "proteins",
    "sugars": "sugars",
    "processedFoods": "processed_foods",
}
_TRUE_STRINGS = frozenset({"true", "yes", "y", "1"})


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the first balanced `{...}` object found in `text`.

    Raises:
        AnalysisResponseError: if no balanced object exists or it is not valid JSON.
    """
    start = text.find("{")
    if start == -1:
        raise AnalysisResponseError("No JSON object found in response")

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                candidate = text[start : index + 1]
                try:
                    parsed = json.loads(candidate)
                except json.JSONDecodeError as exc:
                    raise AnalysisResponseError(f"Invalid JSON response: {exc}") from exc
                if not isinstance(parsed, dict):
                    raise AnalysisResponseError("JSON response must be an object")
                return parsed
    raise AnalysisResponseError("Unbalanced JSON object in response")


def validate_and_build(data: dict[str, Any]) -> AnalysisOutcome:
    """Build an AnalysisOutcome from parsed JSON.

    Raises:
        AnalysisResponseError: if a required top-level key is missing or null.
    """
    for key in REQUIRED_KEYS:
        if data.get(key) is None:
            raise AnalysisResponseError(f"Missing required top-level field: {key}")

    notes = str(data["analysisNotes"]).strip() or "Analysis completed."
    return AnalysisOutcome(
        calories=coerce_calories(data["calories"]),
        nutritional_categories=coerce_categories(data["nutritionalCategories"]),
        analysis_notes=notes,
    )


def coerce_calories(raw: Any) -> CalorieInfo:
    raw = raw if isinstance(raw, dict) else {}
    calorie_range = raw.get("caloriesRange")
    calorie_range = calorie_range if isinstance(calorie_range, dict) else {}
    return CalorieInfo(
        total_calories=coerce_non_negative(raw.get("totalCalories")),
        calories_range=CalorieRange(
            min=coerce_non_negative(calorie_range.get("min")),
            max=coerce_non_negative(calorie_range.get("max")),
        ),
        confidence=coerce_confidence(raw.get("confidence")),
    )


def coerce_categories(raw: Any) -> NutritionalCategories:
    raw = raw if isinstance(raw, dict) else {}
    return NutritionalCategories(
        **{attr: coerce_category(raw.get(key)) for key, attr in _CATEGORY_KEYS.items()}
    )


def coerce_category(raw: Any) -> CategoryInfo:
    """Always returns a well-formed CategoryInfo, whatever `raw` is."""
    raw = raw if isinstance(raw, dict) else {}
    return CategoryInfo(
        present=coerce_present(raw.get("present")),
        portion=coerce_portion(raw.get("portion")),
        confidence=coerce_confidence(raw.get("confidence")),
    )


def coerce_present(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, float):
        return not math.isnan(value) and value != 0.0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def coerce_portion(value: Any) -> Portion:
    if isinstance(value, Portion):
        return value
    if isinstance(value, str):
        try:
            return Portion(value.strip().lower())
        except ValueError:
            return Portion.LOW
    return Portion.LOW


def coerce_confidence(value: Any) -> float:
    number = _to_float(value)
    if number is None:
        return DEFAULT_CONFIDENCE
    return max(0.0, min(1.0, number))


def coerce_non_negative(value: Any) -> float:
    number = _to_float(value)
    if number is None:
        return 0.0
    return max(0.0, number)


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
