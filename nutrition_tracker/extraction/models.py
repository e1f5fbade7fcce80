from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ImageAttachment:
    """One downloaded image, already resized for transmission."""

    raw_bytes: bytes
    source_url: str


@dataclass(frozen=True)
class AttachmentBundle:
    """Everything extracted from one record for a single analysis request."""

    images: tuple[ImageAttachment, ...]
    source_record_id: str
    captured_at: datetime | None = None
    context: str = ""

    @property
    def representative_url(self) -> str:
        return self.images[0].source_url
