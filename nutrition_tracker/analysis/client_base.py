from abc import ABC, abstractmethod
from collections.abc import Sequence


class BaseVisionClient(ABC):
    """Contract for provider-specific vision model clients."""

    @abstractmethod
    def create_vision_completion(
        self,
        *,
        model: str,
        temperature: float | None,
        prompt: str,
        images: Sequence[bytes],
        json_schema: dict[str, object],
    ) -> str:
        """Send one prompt with all images attached; return the response text.

        `temperature=None` means the parameter is omitted from the request.
        """
