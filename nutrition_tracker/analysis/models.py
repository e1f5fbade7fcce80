import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Portion(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


CATEGORY_NAMES: tuple[str, ...] = (
    "vegetables",
    "fruits",
    "proteins",
    "sugars",
    "processed_foods",
)


@dataclass(frozen=True)
class CalorieRange:
    min: float = 0.0
    max: float = 0.0


@dataclass(frozen=True)
class CalorieInfo:
    """Estimated energy content of the whole meal."""

    total_calories: float = 0.0
    calories_range: CalorieRange = field(default_factory=CalorieRange)
    confidence: float = 0.0


@dataclass(frozen=True)
class CategoryInfo:
    """Presence of one nutritional category in the meal."""

    present: bool = False
    portion: Portion = Portion.LOW
    confidence: float = 0.0


@dataclass(frozen=True)
class NutritionalCategories:
    vegetables: CategoryInfo = field(default_factory=CategoryInfo)
    fruits: CategoryInfo = field(default_factory=CategoryInfo)
    proteins: CategoryInfo = field(default_factory=CategoryInfo)
    sugars: CategoryInfo = field(default_factory=CategoryInfo)
    processed_foods: CategoryInfo = field(default_factory=CategoryInfo)

    def items(self) -> list[tuple[str, CategoryInfo]]:
        return [(name, getattr(self, name)) for name in CATEGORY_NAMES]

    def present_count(self) -> int:
        return sum(1 for _, info in self.items() if info.present)


@dataclass(frozen=True)
class AnalysisOutcome:
    """Model-derived part of an analysis."""

    calories: CalorieInfo
    nutritional_categories: NutritionalCategories
    analysis_notes: str
    used_fallback: bool = False

    def average_confidence(self) -> float:
        confidences = [self.calories.confidence] + [
            info.confidence for _, info in self.nutritional_categories.items()
        ]
        return sum(confidences) / len(confidences)


@dataclass(frozen=True)
class AnalysisResult:
    """Persisted nutritional verdict for one record. Never mutated after creation."""

    id: str
    created_at: datetime
    updated_at: datetime
    image_url: str
    extracted_date_time: datetime | None
    calories: CalorieInfo
    nutritional_categories: NutritionalCategories
    analysis_notes: str
    source_record_id: str | None = None


def wall_clock(value: datetime | None) -> datetime | None:
    """Return `value` as a naive datetime; aware values are converted to UTC first."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def new_analysis_result(
    outcome: AnalysisOutcome,
    *,
    image_url: str,
    extracted_date_time: datetime | None,
    source_record_id: str | None,
    now: datetime | None = None,
) -> AnalysisResult:
    """Create a result with a fresh id and both timestamps set to now.

    The capture time is kept as a naive wall-clock value, as EXIF records it.
    An aware capture time is converted to UTC and stored naive.
    """
    created = now or datetime.now(timezone.utc)
    return AnalysisResult(
        id=str(uuid.uuid4()),
        created_at=created,
        updated_at=created,
        image_url=image_url,
        extracted_date_time=wall_clock(extracted_date_time),
        calories=outcome.calories,
        nutritional_categories=outcome.nutritional_categories,
        analysis_notes=outcome.analysis_notes,
        source_record_id=source_record_id,
    )


FALLBACK_CONFIDENCE = 0.1
FALLBACK_NOTES = (
    "Nutritional analysis could not be completed. Please try a clearer photo "
    "or check connectivity with the model provider."
)


def fallback_outcome() -> AnalysisOutcome:
    """Fixed low-confidence outcome used whenever the model cannot be used."""
    absent = CategoryInfo(present=False, portion=Portion.LOW, confidence=FALLBACK_CONFIDENCE)
    return AnalysisOutcome(
        calories=CalorieInfo(
            total_calories=0.0,
            calories_range=CalorieRange(min=0.0, max=0.0),
            confidence=FALLBACK_CONFIDENCE,
        ),
        nutritional_categories=NutritionalCategories(
            vegetables=absent,
            fruits=absent,
            proteins=absent,
            sugars=absent,
            processed_foods=absent,
        ),
        analysis_notes=FALLBACK_NOTES,
        used_fallback=True,
    )
