from datetime import datetime
from typing import Any

from nutrition_tracker.analysis.models import AnalysisResult
from nutrition_tracker.logging.logger import Log
from nutrition_tracker.storage.base import BaseAnalysisStore, as_aware, meal_time
from nutrition_tracker.storage.exceptions import StorageError
from nutrition_tracker.storage.serialization import result_from_dict, result_to_dict


class InMemoryAnalysisStore(BaseAnalysisStore):
    """Process-local store owning the records and the source-record index.

    Records are kept in their serialized form so every read exercises the same
    mapping a durable store would.
    """

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._source_index: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._records)

    def save(self, result: AnalysisResult) -> AnalysisResult:
        Log.info("Saving analysis", id=result.id, source_record_id=result.source_record_id)
        try:
            record = result_to_dict(result)
        except (AttributeError, TypeError, ValueError) as exc:
            raise StorageError(f"Cannot serialize analysis {result.id}: {exc}") from exc

        self._records[result.id] = record
        # Index last: the record must be readable before it becomes discoverable.
        if result.source_record_id:
            self._source_index[result.source_record_id] = result.id
        Log.info("Analysis saved", id=result.id, total_records=len(self._records))
        return result

    def find_by_id(self, result_id: str) -> AnalysisResult | None:
        record = self._records.get(result_id)
        if record is None:
            Log.debug("Analysis not found", id=result_id)
            return None
        return self._to_result(record)

    def find_by_source_record_id(self, source_record_id: str) -> AnalysisResult | None:
        result_id = self._source_index.get(source_record_id)
        if result_id is None:
            Log.debug("No analysis for source record", source_record_id=source_record_id)
            return None
        return self.find_by_id(result_id)

    def find_by_date_range(self, start: datetime, end: datetime) -> list[AnalysisResult]:
        lower, upper = as_aware(start), as_aware(end)
        results = []
        for record in self._records.values():
            result = self._to_result(record)
            if result is not None and lower <= meal_time(result) <= upper:
                results.append(result)
        Log.debug("Analyses found by date range", count=len(results))
        return results

    def find_all(self, offset: int = 0, limit: int = 50) -> list[AnalysisResult]:
        results = [
            result
            for result in (self._to_result(record) for record in self._records.values())
            if result is not None
        ]
        results.sort(key=lambda r: as_aware(r.created_at), reverse=True)
        return results[max(0, offset) : max(0, offset) + max(0, limit)]

    @staticmethod
    def _to_result(record: dict[str, Any]) -> AnalysisResult | None:
        try:
            return result_from_dict(record)
        except (KeyError, TypeError, ValueError) as exc:
            Log.warning(f"Failed to map stored analysis: {exc}", id=record.get("id"))
            return None
