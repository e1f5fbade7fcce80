from abc import ABC, abstractmethod
from datetime import datetime, timezone

from nutrition_tracker.analysis.models import AnalysisResult


class BaseAnalysisStore(ABC):
    """Contract for persisting analysis results.

    Reads are best-effort: failures are logged and reported as None or [].
    Writes propagate their failures.
    """

    @abstractmethod
    def save(self, result: AnalysisResult) -> AnalysisResult:
        """Persist `result` and index it by its source record id.

        Raises:
            StorageError: if the result cannot be stored.
        """

    @abstractmethod
    def find_by_id(self, result_id: str) -> AnalysisResult | None:
        """Return the result with this internal id."""

    @abstractmethod
    def find_by_source_record_id(self, source_record_id: str) -> AnalysisResult | None:
        """Return the result produced for this source record."""

    @abstractmethod
    def find_by_date_range(self, start: datetime, end: datetime) -> list[AnalysisResult]:
        """Return results whose meal time lies within [start, end].

        The meal time is the capture time when known, else the creation time.
        """

    @abstractmethod
    def find_all(self, offset: int = 0, limit: int = 50) -> list[AnalysisResult]:
        """Return a page of results, most recently created first."""

    def exists(self, source_record_id: str) -> AnalysisResult | None:
        """Idempotency check: the stored result for this record, if any."""
        return self.find_by_source_record_id(source_record_id)


def meal_time(result: AnalysisResult) -> datetime:
    return as_aware(result.extracted_date_time or result.created_at)


def as_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
