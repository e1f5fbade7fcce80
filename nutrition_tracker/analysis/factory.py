from typing import ClassVar

from nutrition_tracker.analysis.base import BaseAnalysisRequestor
from nutrition_tracker.analysis.example_client_adapter import ExampleClientAdapter
from nutrition_tracker.analysis.openai_client_adapter import OpenAIClientAdapter
from nutrition_tracker.analysis.requestor import AnalysisRequestor
from nutrition_tracker.config.settings import Settings


class AnalysisRequestorFactory:
    """Creates the configured analysis requestor."""

    PROVIDERS: ClassVar[tuple[str, ...]] = ("openai", "openai_compatible", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseAnalysisRequestor:
        """Create a configured requestor from application settings."""
        provider = settings.analysis_provider.lower()
        if provider == "example":
            return AnalysisRequestor(
                client=ExampleClientAdapter(),
                model="example",
                temperature=0.0,
            )
        client = OpenAIClientAdapter(
            api_key=settings.openai_api_key,
            timeout_seconds=settings.openai_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )
        return AnalysisRequestor(
            client=client,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return settings.openai_base_url.strip() or None
        if provider == "openai_compatible":
            url = settings.openai_base_url.strip()
            if not url:
                raise ValueError(
                    "openai_base_url is required for analysis_provider=openai_compatible"
                )
            return url
        raise ValueError(
            f"Unknown analysis provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
