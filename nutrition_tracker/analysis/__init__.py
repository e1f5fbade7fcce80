from nutrition_tracker.analysis.base import BaseAnalysisRequestor
from nutrition_tracker.analysis.factory import AnalysisRequestorFactory
from nutrition_tracker.analysis.requestor import AnalysisRequestor

__all__ = ["AnalysisRequestor", "AnalysisRequestorFactory", "BaseAnalysisRequestor"]
