import io
from collections.abc import Callable
from datetime import datetime, timezone

import pytest
from PIL import ExifTags, Image

from nutrition_tracker.analysis.models import (
    AnalysisOutcome,
    AnalysisResult,
    CalorieInfo,
    CalorieRange,
    CategoryInfo,
    NutritionalCategories,
    Portion,
    new_analysis_result,
)


def _jpeg_bytes(
    size: tuple[int, int] = (64, 48),
    color: str = "red",
    exif_tags: dict[int, str] | None = None,
) -> bytes:
    buf = io.BytesIO()
    img = Image.new("RGB", size, color)
    if exif_tags:
        exif = Image.Exif()
        for tag, value in exif_tags.items():
            exif[tag] = value
        img.save(buf, format="JPEG", exif=exif)
    else:
        img.save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture()
def make_jpeg() -> Callable[..., bytes]:
    """Factory building in-memory JPEGs with optional EXIF tags."""
    return _jpeg_bytes


@pytest.fixture()
def plain_jpeg_bytes() -> bytes:
    return _jpeg_bytes()


@pytest.fixture()
def exif_jpeg_bytes() -> bytes:
    """JPEG carrying both an original-capture and a modification date."""
    return _jpeg_bytes(
        exif_tags={
            ExifTags.Base.DateTimeOriginal: "2024:05:01 12:30:00",
            ExifTags.Base.DateTime: "2024:06:01 08:00:00",
        }
    )


@pytest.fixture()
def large_png_bytes() -> bytes:
    """2048x1024 PNG with an alpha channel."""
    buf = io.BytesIO()
    Image.new("RGBA", (2048, 1024), (0, 128, 0, 128)).save(buf, format="PNG")
    return buf.getvalue()


def _salad_outcome() -> AnalysisOutcome:
    absent = CategoryInfo(present=False, portion=Portion.LOW, confidence=0.6)
    return AnalysisOutcome(
        calories=CalorieInfo(
            total_calories=450,
            calories_range=CalorieRange(min=380, max=520),
            confidence=0.6,
        ),
        nutritional_categories=NutritionalCategories(
            vegetables=CategoryInfo(present=True, portion=Portion.HIGH, confidence=0.8),
            fruits=absent,
            proteins=CategoryInfo(present=True, portion=Portion.MEDIUM, confidence=0.7),
            sugars=absent,
            processed_foods=absent,
        ),
        analysis_notes="Mixed salad with grilled chicken.",
    )


@pytest.fixture()
def salad_outcome() -> AnalysisOutcome:
    return _salad_outcome()


@pytest.fixture()
def make_result() -> Callable[..., AnalysisResult]:
    """Factory for AnalysisResults built from the salad outcome."""

    def _make(
        source_record_id: str | None = "rec-1",
        extracted_date_time: datetime | None = None,
        created_at: datetime | None = None,
        image_url: str = "https://files.example.com/meal.jpg",
    ) -> AnalysisResult:
        return new_analysis_result(
            _salad_outcome(),
            image_url=image_url,
            extracted_date_time=extracted_date_time,
            source_record_id=source_record_id,
            now=created_at or datetime(2024, 5, 1, 13, 0, tzinfo=timezone.utc),
        )

    return _make
