from nutrition_tracker.config.settings import Settings
from nutrition_tracker.database.connection import init_pool
from nutrition_tracker.storage.base import BaseAnalysisStore
from nutrition_tracker.storage.memory_store import InMemoryAnalysisStore
from nutrition_tracker.storage.postgres_store import PostgresAnalysisStore


class AnalysisStoreFactory:
    """Creates the analysis store selected by settings."""

    STORES = ("memory", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> BaseAnalysisStore:
        kind = settings.analysis_store.lower()
        if kind == "memory":
            return InMemoryAnalysisStore()
        if kind == "postgres":
            init_pool(settings)
            store = PostgresAnalysisStore()
            store.ensure_schema()
            return store
        raise ValueError(f"Unknown analysis store '{kind}'. Choose from: {list(cls.STORES)}")
