from abc import ABC, abstractmethod
from datetime import datetime


class BaseImageFetcher(ABC):
    """Contract for downloading image bytes."""

    @abstractmethod
    def fetch(self, url: str) -> bytes:
        """Download the original bytes behind `url`.

        Raises:
            ImageDownloadError: on network failure, timeout or non-2xx status.
        """

    def close(self) -> None:
        """Release network resources held by the fetcher."""


class BaseImageProcessor(ABC):
    """Contract for image metadata extraction and transcoding."""

    @abstractmethod
    def extract_captured_at(self, raw: bytes) -> datetime | None:
        """Return the capture timestamp embedded in the image, if any.

        Never raises; missing or unreadable metadata yields None.
        """

    @abstractmethod
    def prepare(self, raw: bytes) -> bytes:
        """Downscale and recompress the image for transmission to the model.

        Raises:
            ImageProcessingError: if the bytes are not a decodable image.
        """
