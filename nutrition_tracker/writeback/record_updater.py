from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from nutrition_tracker.logging.logger import Log
from nutrition_tracker.records.base import BaseRecordStore, Properties
from nutrition_tracker.writeback.field_map import resolve_fields

MAX_CATEGORY_OPTIONS = 10
MAX_NOTES_LENGTH = 2000
DEFAULT_NOTES = "No additional notes"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _number(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value


def _rich_text(content: str) -> dict[str, Any]:
    return {"rich_text": [{"type": "text", "text": {"content": content}}]}


def clean_option_name(label: str) -> str:
    """Choice options cannot contain commas; keep the part before the first one."""
    return label.split(",", 1)[0].strip()


class RecordUpdater:
    """Writes an analysis summary onto the fields a record actually has.

    Only fields named in WRITEBACK_FIELDS are touched and none is ever created.
    The user-supplied context field is input-only and never written.
    """

    def __init__(
        self,
        record_store: BaseRecordStore,
        *,
        fallback_to_now: bool = True,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._record_store = record_store
        self._fallback_to_now = fallback_to_now
        self._clock = clock

    def write_back(
        self,
        record_id: str,
        calories: float,
        category_labels: list[str],
        notes: str,
        captured_at: datetime | None,
    ) -> bool:
        """Update the record; return False (never raise) on failure."""
        Log.info("Writing analysis back to record", record_id=record_id)
        try:
            existing = self._record_store.retrieve_properties(record_id)
            update = self.build_update(existing, calories, category_labels, notes, captured_at)
            if not update:
                Log.warning("No writable fields found on record", record_id=record_id)
                return True
            self._record_store.update_properties(record_id, update)
        except Exception as exc:
            Log.error(f"Failed to update record: {exc}", record_id=record_id)
            return False

        Log.info("Record updated", record_id=record_id, fields=sorted(update))
        return True

    def build_update(
        self,
        existing: Properties,
        calories: float,
        category_labels: list[str],
        notes: str,
        captured_at: datetime | None,
    ) -> Properties:
        """Build the property payload for the fields present in `existing`."""
        fields = resolve_fields(existing)
        notes = (notes or DEFAULT_NOTES)[:MAX_NOTES_LENGTH]
        update: Properties = {}

        if "meal_time" in fields:
            meal_time = captured_at
            if meal_time is None and self._fallback_to_now:
                meal_time = self._clock()
            if meal_time is not None:
                update[fields["meal_time"]] = {"date": {"start": meal_time.isoformat()}}
                Log.debug(
                    "Setting meal time",
                    value=meal_time.isoformat(),
                    source="exif" if captured_at is not None else "fallback",
                )

        if "calories" in fields:
            update[fields["calories"]] = {"number": _number(calories)}

        if "categories" in fields:
            options = [clean_option_name(label) for label in category_labels[:MAX_CATEGORY_OPTIONS]]
            update[fields["categories"]] = {
                "multi_select": [{"name": name} for name in options if name]
            }

        if "analysis" in fields:
            update[fields["analysis"]] = _rich_text(notes)

        if "legacy_notes" in fields:
            update[fields["legacy_notes"]] = _rich_text(notes)

        if "analyzed" in fields:
            update[fields["analyzed"]] = {"checkbox": True}

        return update
