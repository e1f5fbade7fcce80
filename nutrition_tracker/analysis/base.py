from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from nutrition_tracker.analysis.models import AnalysisOutcome


class BaseAnalysisRequestor(ABC):
    """Contract for turning meal photos into a nutritional verdict."""

    @abstractmethod
    def analyze(
        self,
        images: Sequence[bytes],
        captured_at: datetime | None,
        context: str = "",
    ) -> AnalysisOutcome:
        """Analyze all images of one meal in a single model request.

        Never raises: any failure yields the fixed fallback outcome.
        """
