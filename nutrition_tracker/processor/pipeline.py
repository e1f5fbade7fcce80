from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from nutrition_tracker.analysis.models import AnalysisOutcome, AnalysisResult
from nutrition_tracker.extraction.models import AttachmentBundle


class RecordState(str, Enum):
    PENDING = "pending"
    CHECK_EXISTING = "check_existing"
    EXTRACT = "extract"
    ANALYZE = "analyze"
    PERSIST = "persist"
    WRITE_BACK = "write_back"
    DONE = "done"
    SKIPPED_EXISTING = "skipped_existing"
    SKIPPED_NO_IMAGES = "skipped_no_images"
    SKIPPED_ERROR = "skipped_error"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES

    @property
    def yields_result(self) -> bool:
        return self in (RecordState.DONE, RecordState.SKIPPED_EXISTING)


_TERMINAL_STATES = frozenset(
    {
        RecordState.DONE,
        RecordState.SKIPPED_EXISTING,
        RecordState.SKIPPED_NO_IMAGES,
        RecordState.SKIPPED_ERROR,
    }
)


@dataclass(slots=True)
class RecordContext:
    """Accumulates data as one record moves through the pipeline steps."""

    record_id: str
    state: RecordState = RecordState.PENDING
    bundle: AttachmentBundle | None = None
    outcome: AnalysisOutcome | None = None
    result: AnalysisResult | None = None
    written_back: bool = False
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: RecordContext) -> RecordContext:
        raise NotImplementedError
