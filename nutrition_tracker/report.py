"""Human-readable summary of analysis results for the command line."""

from nutrition_tracker.analysis.models import AnalysisResult
from nutrition_tracker.writeback.field_map import CATEGORY_LABELS

SEPARATOR = "=" * 60


def _percent(confidence: float) -> str:
    return f"{round(confidence * 100)}%"


def _number(value: float) -> str:
    return f"{value:g}"


def format_result(result: AnalysisResult) -> str:
    calories = result.calories
    captured = (
        result.extracted_date_time.strftime("%Y-%m-%d %H:%M")
        if result.extracted_date_time
        else "unavailable"
    )
    image = result.image_url if len(result.image_url) <= 50 else f"{result.image_url[:50]}..."
    lines = [
        SEPARATOR,
        f"Record: {result.source_record_id or '-'}",
        f"Image: {image}",
        f"Captured: {captured}",
        f"Calories: {_number(calories.total_calories)} "
        f"({_number(calories.calories_range.min)}-{_number(calories.calories_range.max)})",
        f"Calorie confidence: {_percent(calories.confidence)}",
        "",
        "Nutritional categories:",
    ]
    present = [
        (name, info) for name, info in result.nutritional_categories.items() if info.present
    ]
    for index, (name, info) in enumerate(present, start=1):
        lines.append(
            f"  {index}. {CATEGORY_LABELS[name].upper()}: {info.portion.value} "
            f"(confidence: {_percent(info.confidence)})"
        )
    if not present:
        lines.append("  No clear nutritional categories identified")
    lines += [
        "",
        f"Notes: {result.analysis_notes}",
        f"Processed: {result.created_at.strftime('%Y-%m-%d %H:%M:%S')}",
    ]
    return "\n".join(lines)


def format_report(results: list[AnalysisResult]) -> str:
    if not results:
        return "No records were analyzed."
    return "\n\n".join(format_result(result) for result in results) + f"\n{SEPARATOR}"
