from nutrition_tracker.analysis.base import BaseAnalysisRequestor
from nutrition_tracker.analysis.models import new_analysis_result
from nutrition_tracker.extraction.attachment_extractor import AttachmentExtractor
from nutrition_tracker.logging.logger import Log
from nutrition_tracker.processor.pipeline import PipelineStep, RecordContext, RecordState
from nutrition_tracker.storage.base import BaseAnalysisStore
from nutrition_tracker.writeback.field_map import category_labels
from nutrition_tracker.writeback.record_updater import RecordUpdater


class CheckExistingStep(PipelineStep):
    def __init__(self, store: BaseAnalysisStore) -> None:
        self._store = store

    def run(self, context: RecordContext) -> RecordContext:
        context.state = RecordState.CHECK_EXISTING
        existing = self._store.exists(context.record_id)
        if existing is not None:
            Log.info("Analysis already exists for record", record_id=context.record_id, id=existing.id)
            context.result = existing
            context.state = RecordState.SKIPPED_EXISTING
        return context


class ExtractAttachmentsStep(PipelineStep):
    def __init__(self, extractor: AttachmentExtractor) -> None:
        self._extractor = extractor

    def run(self, context: RecordContext) -> RecordContext:
        context.state = RecordState.EXTRACT
        context.bundle = self._extractor.extract(context.record_id)
        if context.bundle is None:
            context.state = RecordState.SKIPPED_NO_IMAGES
        return context


class AnalyzeStep(PipelineStep):
    def __init__(self, requestor: BaseAnalysisRequestor) -> None:
        self._requestor = requestor

    def run(self, context: RecordContext) -> RecordContext:
        if context.bundle is None:
            raise ValueError("RecordContext.bundle must be set before analysis")
        context.state = RecordState.ANALYZE
        bundle = context.bundle
        context.outcome = self._requestor.analyze(
            [image.raw_bytes for image in bundle.images],
            bundle.captured_at,
            bundle.context,
        )
        return context


class PersistStep(PipelineStep):
    def __init__(self, store: BaseAnalysisStore) -> None:
        self._store = store

    def run(self, context: RecordContext) -> RecordContext:
        if context.bundle is None or context.outcome is None:
            raise ValueError("RecordContext.bundle and outcome must be set before persist")
        context.state = RecordState.PERSIST
        result = new_analysis_result(
            context.outcome,
            image_url=context.bundle.representative_url,
            extracted_date_time=context.bundle.captured_at,
            source_record_id=context.record_id,
        )
        context.result = self._store.save(result)
        return context


class WriteBackStep(PipelineStep):
    def __init__(self, updater: RecordUpdater) -> None:
        self._updater = updater

    def run(self, context: RecordContext) -> RecordContext:
        if context.result is None:
            raise ValueError("RecordContext.result must be set before write-back")
        context.state = RecordState.WRITE_BACK
        result = context.result
        context.written_back = self._updater.write_back(
            context.record_id,
            result.calories.total_calories,
            category_labels(result.nutritional_categories),
            result.analysis_notes,
            result.extracted_date_time,
        )
        if not context.written_back:
            Log.warning(
                "Analysis persisted but record was not updated",
                record_id=context.record_id,
                id=result.id,
            )
        context.state = RecordState.DONE
        return context
