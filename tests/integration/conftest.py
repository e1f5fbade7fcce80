import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from nutrition_tracker.config.settings import Settings
from nutrition_tracker.database.connection import close_pool, get_connection, init_pool
from nutrition_tracker.storage.postgres_store import PostgresAnalysisStore


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "nutrition_tracker_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute("SELECT 1")
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        PostgresAnalysisStore().ensure_schema()
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    cleanup: list[str] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for result_id in cleanup:
                cur.execute("DELETE FROM nutrition_analyses WHERE id = %s", (result_id,))
        conn.commit()
