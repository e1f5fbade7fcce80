"""Pillow-backed image handling: EXIF capture time and transmission resize."""

import io
from datetime import datetime

from PIL import ExifTags, Image, ImageOps, UnidentifiedImageError

from nutrition_tracker.images.base import BaseImageProcessor
from nutrition_tracker.images.exceptions import ImageProcessingError
from nutrition_tracker.logging.logger import Log

# Original capture first, then digitization (a.k.a. CreateDate), then file modification.
CAPTURE_TIME_TAGS: tuple[tuple[str, int], ...] = (
    ("DateTimeOriginal", ExifTags.Base.DateTimeOriginal),
    ("DateTimeDigitized", ExifTags.Base.DateTimeDigitized),
    ("DateTime", ExifTags.Base.DateTime),
)

_EXIF_DATE_FORMATS = ("%Y:%m:%d %H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y:%m:%d %H:%M")


def parse_exif_datetime(value: object) -> datetime | None:
    """Parse an EXIF date string such as '2024:05:01 12:30:00'."""
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if not isinstance(value, str):
        return None
    cleaned = value.strip().rstrip("\x00").strip()
    if not cleaned or cleaned.startswith("0000"):
        return None
    for fmt in _EXIF_DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def pick_capture_time(tags: dict[int, object]) -> tuple[datetime | None, str | None]:
    """Return the highest-precedence parsable capture time and the tag it came from."""
    for name, tag in CAPTURE_TIME_TAGS:
        parsed = parse_exif_datetime(tags.get(tag))
        if parsed is not None:
            return parsed, name
    return None, None


class PillowImageProcessor(BaseImageProcessor):
    """Reads EXIF capture dates and produces bounded JPEGs using Pillow."""

    def __init__(self, *, max_dimension: int = 1024, jpeg_quality: int = 85) -> None:
        self._max_dimension = max_dimension
        self._jpeg_quality = jpeg_quality

    def extract_captured_at(self, raw: bytes) -> datetime | None:
        try:
            with Image.open(io.BytesIO(raw)) as img:
                exif = img.getexif()
                tags: dict[int, object] = dict(exif.items())
                tags.update(exif.get_ifd(ExifTags.IFD.Exif).items())
        except Exception as exc:
            Log.warning(f"Could not read image metadata: {exc}")
            return None

        captured_at, source = pick_capture_time(tags)
        if captured_at is None:
            Log.debug("No EXIF capture date found in image")
            return None
        Log.info("Extracted EXIF capture date", captured_at=captured_at.isoformat(), source=source)
        return captured_at

    def prepare(self, raw: bytes) -> bytes:
        try:
            with Image.open(io.BytesIO(raw)) as opened:
                img = ImageOps.exif_transpose(opened)
                img = _to_rgb(img)
                img.thumbnail(
                    (self._max_dimension, self._max_dimension), Image.Resampling.LANCZOS
                )
                buf = io.BytesIO()
                img.save(buf, format="JPEG", quality=self._jpeg_quality, optimize=True)
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as exc:
            raise ImageProcessingError(f"Failed to process image: {exc}") from exc
        return buf.getvalue()


def _to_rgb(img: Image.Image) -> Image.Image:
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        return Image.alpha_composite(background, rgba).convert("RGB")
    return img.convert("RGB")
