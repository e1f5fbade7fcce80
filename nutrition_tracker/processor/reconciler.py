from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from nutrition_tracker.analysis.factory import AnalysisRequestorFactory
from nutrition_tracker.analysis.models import AnalysisResult
from nutrition_tracker.config.settings import Settings
from nutrition_tracker.extraction.attachment_extractor import AttachmentExtractor
from nutrition_tracker.images.base import BaseImageFetcher
from nutrition_tracker.images.httpx_fetcher import HttpxImageFetcher
from nutrition_tracker.images.pillow_processor import PillowImageProcessor
from nutrition_tracker.logging.logger import Log
from nutrition_tracker.processor.pipeline import PipelineStep, RecordContext, RecordState
from nutrition_tracker.processor.steps import (
    AnalyzeStep,
    CheckExistingStep,
    ExtractAttachmentsStep,
    PersistStep,
    WriteBackStep,
)
from nutrition_tracker.records.base import BaseRecordStore
from nutrition_tracker.records.notion_adapter import NotionRecordStore
from nutrition_tracker.storage.base import BaseAnalysisStore
from nutrition_tracker.storage.factory import AnalysisStoreFactory
from nutrition_tracker.writeback.record_updater import RecordUpdater

DEFAULT_LIMIT = 5


@dataclass
class RunSummary:
    """Per-state record counts of one reconciliation run."""

    discovered: int = 0
    states: Counter[RecordState] = field(default_factory=Counter)

    def count(self, state: RecordState) -> int:
        return self.states[state]


class Reconciler:
    """Finds records that still need analysis and runs each through the pipeline.

    Records are processed one at a time, in discovery order:
    check existing -> extract -> analyze -> persist -> write back.
    A failure in one record is logged and never stops the batch.
    """

    def __init__(
        self,
        record_store: BaseRecordStore,
        steps: Sequence[PipelineStep],
        *,
        fetcher: BaseImageFetcher | None = None,
    ) -> None:
        self._record_store = record_store
        self._steps = list(steps)
        self._fetcher = fetcher
        self.last_summary = RunSummary()

    def run(
        self,
        collection_id: str,
        explicit_record_id: str | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[AnalysisResult]:
        """Process pending records (or one explicit record) and return their results.

        Records skipped for lack of images or because of an error are omitted.

        Raises:
            RecordStoreError: if pending records cannot be listed.
        """
        record_ids = self._discover(collection_id, explicit_record_id, limit)
        summary = RunSummary(discovered=len(record_ids))
        results: list[AnalysisResult] = []

        for record_id in record_ids:
            context = self.process_record(record_id)
            summary.states[context.state] += 1
            if context.state.yields_result and context.result is not None:
                results.append(context.result)

        self.last_summary = summary
        Log.info(
            "Reconciliation finished",
            discovered=summary.discovered,
            done=summary.count(RecordState.DONE),
            already_analyzed=summary.count(RecordState.SKIPPED_EXISTING),
            no_images=summary.count(RecordState.SKIPPED_NO_IMAGES),
            errors=summary.count(RecordState.SKIPPED_ERROR),
        )
        return results

    def process_record(self, record_id: str) -> RecordContext:
        """Run all steps for one record; always returns a context in a terminal state."""
        context = RecordContext(record_id=record_id)
        try:
            for step in self._steps:
                context = step.run(context)
                if context.state.is_terminal:
                    break
        except Exception as exc:
            failed_at = context.state.value
            context.state = RecordState.SKIPPED_ERROR
            context.error_message = str(exc)
            Log.error(
                f"Failed to process record: {exc}",
                record_id=record_id,
                step=failed_at,
                error_type=type(exc).__name__,
            )
            return context

        Log.info("Record processed", record_id=record_id, state=context.state.value)
        return context

    def _discover(
        self, collection_id: str, explicit_record_id: str | None, limit: int
    ) -> list[str]:
        if explicit_record_id:
            Log.info("Processing explicit record", record_id=explicit_record_id)
            return [explicit_record_id]
        return self._record_store.list_pending_record_ids(collection_id, limit)

    def close(self) -> None:
        """Close the image fetcher's HTTP client."""
        if self._fetcher is not None:
            self._fetcher.close()


def build_reconciler(
    settings: Settings,
    record_store: BaseRecordStore | None = None,
    store: BaseAnalysisStore | None = None,
) -> Reconciler:
    """Build a Reconciler with all required adapters."""
    record_store = record_store or NotionRecordStore(
        api_key=settings.notion_api_key,
        timeout_seconds=settings.notion_timeout_seconds,
    )
    store = store or AnalysisStoreFactory.create(settings)
    fetcher = HttpxImageFetcher(timeout_seconds=settings.image_download_timeout_seconds)
    extractor = AttachmentExtractor(
        record_store,
        fetcher,
        PillowImageProcessor(
            max_dimension=settings.image_max_dimension,
            jpeg_quality=settings.image_jpeg_quality,
        ),
    )
    requestor = AnalysisRequestorFactory.create(settings)
    updater = RecordUpdater(record_store, fallback_to_now=settings.meal_time_fallback_to_now)
    return Reconciler(
        record_store,
        steps=[
            CheckExistingStep(store),
            ExtractAttachmentsStep(extractor),
            AnalyzeStep(requestor),
            PersistStep(store),
            WriteBackStep(updater),
        ],
        fetcher=fetcher,
    )
