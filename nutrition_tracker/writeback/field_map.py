from nutrition_tracker.analysis.models import NutritionalCategories
from nutrition_tracker.records.base import Properties
from nutrition_tracker.records.fields import WRITEBACK_FIELDS

CATEGORY_LABELS: dict[str, str] = {
    "vegetables": "Vegetables",
    "fruits": "Fruits",
    "proteins": "Proteins",
    "sugars": "Sugars",
    "processed_foods": "Processed foods",
}
NO_CATEGORIES_LABEL = "No categories identified"


def resolve_fields(
    properties: Properties,
    table: dict[str, tuple[str, ...]] = WRITEBACK_FIELDS,
) -> dict[str, str]:
    """Map each concept to the first of its candidate field names the record has.

    Concepts with no matching field are left out.
    """
    resolved: dict[str, str] = {}
    for concept, candidates in table.items():
        for name in candidates:
            if name in properties:
                resolved[concept] = name
                break
    return resolved


def category_labels(categories: NutritionalCategories) -> list[str]:
    """Render present categories as 'Label (portion)' strings."""
    labels = [
        f"{CATEGORY_LABELS[name]} ({info.portion.value})"
        for name, info in categories.items()
        if info.present
    ]
    return labels or [NO_CATEGORIES_LABEL]
