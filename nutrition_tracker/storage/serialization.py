"""Interchange shape of an AnalysisResult.

Numbers stay numbers, nested objects stay nested and datetimes are ISO-8601
strings, so `result_from_dict(result_to_dict(r)) == r`.
"""

from datetime import datetime
from typing import Any

from nutrition_tracker.analysis.models import (
    AnalysisResult,
    CalorieInfo,
    CalorieRange,
    CategoryInfo,
    NutritionalCategories,
    Portion,
)

# NutritionalCategories attribute -> interchange key.
CATEGORY_KEYS: dict[str, str] = {
    "vegetables": "vegetables",
    "fruits": "fruits",
    "proteins": "proteins",
    "sugars": "sugars",
    "processed_foods": "processedFoods",
}


def calories_to_dict(calories: CalorieInfo) -> dict[str, Any]:
    return {
        "totalCalories": calories.total_calories,
        "caloriesRange": {
            "min": calories.calories_range.min,
            "max": calories.calories_range.max,
        },
        "confidence": calories.confidence,
    }


def calories_from_dict(raw: dict[str, Any]) -> CalorieInfo:
    calorie_range = raw.get("caloriesRange") or {}
    return CalorieInfo(
        total_calories=raw["totalCalories"],
        calories_range=CalorieRange(min=calorie_range["min"], max=calorie_range["max"]),
        confidence=raw["confidence"],
    )


def categories_to_dict(categories: NutritionalCategories) -> dict[str, Any]:
    return {
        CATEGORY_KEYS[name]: {
            "present": info.present,
            "portion": info.portion.value,
            "confidence": info.confidence,
        }
        for name, info in categories.items()
    }


def categories_from_dict(raw: dict[str, Any]) -> NutritionalCategories:
    return NutritionalCategories(
        **{
            attr: CategoryInfo(
                present=raw[key]["present"],
                portion=Portion(raw[key]["portion"]),
                confidence=raw[key]["confidence"],
            )
            for attr, key in CATEGORY_KEYS.items()
        }
    )


def result_to_dict(result: AnalysisResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "imageUrl": result.image_url,
        "extractedDateTime": _iso(result.extracted_date_time),
        "calories": calories_to_dict(result.calories),
        "nutritionalCategories": categories_to_dict(result.nutritional_categories),
        "analysisNotes": result.analysis_notes,
        "sourceRecordId": result.source_record_id,
        "createdAt": result.created_at.isoformat(),
        "updatedAt": result.updated_at.isoformat(),
    }


def result_from_dict(raw: dict[str, Any]) -> AnalysisResult:
    """Rebuild an AnalysisResult from its interchange shape.

    Raises:
        KeyError, ValueError: if the record is malformed.
    """
    extracted = raw.get("extractedDateTime")
    return AnalysisResult(
        id=raw["id"],
        created_at=datetime.fromisoformat(raw["createdAt"]),
        updated_at=datetime.fromisoformat(raw["updatedAt"]),
        image_url=raw["imageUrl"],
        extracted_date_time=datetime.fromisoformat(extracted) if extracted else None,
        calories=calories_from_dict(raw["calories"]),
        nutritional_categories=categories_from_dict(raw["nutritionalCategories"]),
        analysis_notes=raw["analysisNotes"],
        source_record_id=raw.get("sourceRecordId"),
    )


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
