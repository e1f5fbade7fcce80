from nutrition_tracker.analysis.models import (
    CategoryInfo,
    NutritionalCategories,
    Portion,
    fallback_outcome,
)
from nutrition_tracker.writeback.field_map import (
    NO_CATEGORIES_LABEL,
    category_labels,
    resolve_fields,
)


class TestResolveFields:
    def test_prefers_first_candidate(self) -> None:
        props = {"Calories": {}, "Calorias": {}, "Notas": {}}
        assert resolve_fields(props) == {"calories": "Calories", "legacy_notes": "Notas"}

    def test_falls_back_to_alternate_name(self) -> None:
        assert resolve_fields({"Calorias": {}, "Analizado": {}}) == {
            "calories": "Calorias",
            "analyzed": "Analizado",
        }

    def test_no_matches(self) -> None:
        assert resolve_fields({"Name": {}}) == {}

    def test_custom_table(self) -> None:
        assert resolve_fields({"kcal": {}}, {"calories": ("kcal",)}) == {"calories": "kcal"}


class TestCategoryLabels:
    def test_present_categories_with_portion(self) -> None:
        categories = NutritionalCategories(
            vegetables=CategoryInfo(present=True, portion=Portion.HIGH, confidence=0.9),
            processed_foods=CategoryInfo(present=True, portion=Portion.LOW, confidence=0.4),
        )
        assert category_labels(categories) == ["Vegetables (high)", "Processed foods (low)"]

    def test_nothing_present(self) -> None:
        categories = fallback_outcome().nutritional_categories
        assert category_labels(categories) == [NO_CATEGORIES_LABEL]
