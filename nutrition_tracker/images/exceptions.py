class ImageError(Exception):
    """Base exception for per-image failures."""


class ImageDownloadError(ImageError):
    """Raised when an image cannot be downloaded."""


class ImageProcessingError(ImageError):
    """Raised when an image cannot be decoded or re-encoded."""
