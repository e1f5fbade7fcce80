import httpx

from nutrition_tracker.images.base import BaseImageFetcher
from nutrition_tracker.images.exceptions import ImageDownloadError
from nutrition_tracker.logging.logger import Log


class HttpxImageFetcher(BaseImageFetcher):
    """Downloads images over HTTP with a bounded wait per request."""

    def __init__(self, *, timeout_seconds: int, client: httpx.Client | None = None) -> None:
        self._client = client or httpx.Client(
            timeout=timeout_seconds, follow_redirects=True
        )

    def fetch(self, url: str) -> bytes:
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ImageDownloadError(f"Timed out downloading {_trim(url)}") from exc
        except httpx.HTTPError as exc:
            raise ImageDownloadError(f"Failed to download {_trim(url)}: {exc}") from exc
        if not response.content:
            raise ImageDownloadError(f"Empty response body for {_trim(url)}")
        Log.debug("Downloaded image", url=_trim(url), size=len(response.content))
        return response.content

    def close(self) -> None:
        self._client.close()


def _trim(url: str) -> str:
    return url.split("?", 1)[0]
