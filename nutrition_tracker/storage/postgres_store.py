from datetime import datetime
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from nutrition_tracker.analysis.models import AnalysisResult, wall_clock
from nutrition_tracker.database.connection import get_connection
from nutrition_tracker.logging.logger import Log
from nutrition_tracker.storage.base import BaseAnalysisStore, as_aware
from nutrition_tracker.storage.exceptions import StorageError
from nutrition_tracker.storage.serialization import (
    calories_from_dict,
    calories_to_dict,
    categories_from_dict,
    categories_to_dict,
)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS nutrition_analyses (
    id TEXT PRIMARY KEY,
    image_url TEXT NOT NULL,
    extracted_date_time TIMESTAMP NULL,
    calories JSONB NOT NULL,
    nutritional_categories JSONB NOT NULL,
    analysis_notes TEXT NOT NULL,
    source_record_id TEXT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL
);
CREATE INDEX IF NOT EXISTS nutrition_analyses_source_record_id_idx
    ON nutrition_analyses (source_record_id);
CREATE INDEX IF NOT EXISTS nutrition_analyses_meal_time_idx
    ON nutrition_analyses ((COALESCE(extracted_date_time AT TIME ZONE 'UTC', created_at)));
"""

_COLUMNS = """
    id, image_url, extracted_date_time, calories, nutritional_categories,
    analysis_notes, source_record_id, created_at, updated_at
"""

# Naive capture times are wall-clock values read as UTC, matching storage.base.as_aware.
_MEAL_TIME = "COALESCE(extracted_date_time AT TIME ZONE 'UTC', created_at)"


class PostgresAnalysisStore(BaseAnalysisStore):
    """Database operations for the nutrition_analyses table."""

    def ensure_schema(self) -> None:
        """Create the table and its indexes if they do not exist."""
        with get_connection() as conn:
            conn.execute(SCHEMA_SQL)
            conn.commit()

    def save(self, result: AnalysisResult) -> AnalysisResult:
        Log.info("Saving analysis", id=result.id, source_record_id=result.source_record_id)
        try:
            with get_connection() as conn:
                conn.execute(
                    f"""
                    INSERT INTO nutrition_analyses ({_COLUMNS})
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        result.id,
                        result.image_url,
                        wall_clock(result.extracted_date_time),
                        Jsonb(calories_to_dict(result.calories)),
                        Jsonb(categories_to_dict(result.nutritional_categories)),
                        result.analysis_notes,
                        result.source_record_id,
                        result.created_at,
                        result.updated_at,
                    ),
                )
                conn.commit()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to save analysis {result.id}: {exc}") from exc
        return result

    def find_by_id(self, result_id: str) -> AnalysisResult | None:
        rows = self._query(
            f"SELECT {_COLUMNS} FROM nutrition_analyses WHERE id = %s",
            (result_id,),
        )
        return rows[0] if rows else None

    def find_by_source_record_id(self, source_record_id: str) -> AnalysisResult | None:
        rows = self._query(
            f"""
            SELECT {_COLUMNS} FROM nutrition_analyses
            WHERE source_record_id = %s
            ORDER BY created_at
            LIMIT 1
            """,
            (source_record_id,),
        )
        return rows[0] if rows else None

    def find_by_date_range(self, start: datetime, end: datetime) -> list[AnalysisResult]:
        return self._query(
            f"""
            SELECT {_COLUMNS} FROM nutrition_analyses
            WHERE {_MEAL_TIME} BETWEEN %s AND %s
            ORDER BY {_MEAL_TIME}
            """,
            (as_aware(start), as_aware(end)),
        )

    def find_all(self, offset: int = 0, limit: int = 50) -> list[AnalysisResult]:
        return self._query(
            f"""
            SELECT {_COLUMNS} FROM nutrition_analyses
            ORDER BY created_at DESC
            OFFSET %s LIMIT %s
            """,
            (max(0, offset), max(0, limit)),
        )

    def _query(self, sql: str, params: tuple[Any, ...]) -> list[AnalysisResult]:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall()
            return [_row_to_result(row) for row in rows]
        except (psycopg.Error, RuntimeError, KeyError, TypeError, ValueError) as exc:
            Log.warning(f"Analysis lookup failed: {exc}")
            return []


def _row_to_result(row: dict[str, Any]) -> AnalysisResult:
    return AnalysisResult(
        id=row["id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        image_url=row["image_url"],
        extracted_date_time=row["extracted_date_time"],
        calories=calories_from_dict(row["calories"]),
        nutritional_categories=categories_from_dict(row["nutritional_categories"]),
        analysis_notes=row["analysis_notes"],
        source_record_id=row["source_record_id"],
    )
