class AnalysisError(Exception):
    """Raised when a meal analysis request fails."""


class AnalysisResponseError(AnalysisError):
    """Raised when the model response cannot be parsed into an analysis."""


class AnalysisNetworkError(AnalysisError):
    """Raised when the model provider call fails due to network/infrastructure issues."""
