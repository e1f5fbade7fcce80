"""Collects every image and the free-text context attached to a record.

Scan order:
1. The primary image field.
2. Every other file-typed field.
3. The record's content blocks (image blocks, and file blocks with an image extension).

The first image that carries a readable EXIF date provides the capture time.
Per-image failures are logged and skipped; failing to read the record itself
propagates to the caller.
"""

from collections.abc import Iterator
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlsplit

from nutrition_tracker.extraction.models import AttachmentBundle, ImageAttachment
from nutrition_tracker.images.base import BaseImageFetcher, BaseImageProcessor
from nutrition_tracker.images.exceptions import ImageError
from nutrition_tracker.logging.logger import Log
from nutrition_tracker.records.base import BaseRecordStore, Block, Properties
from nutrition_tracker.records.fields import (
    IMAGE_EXTENSIONS,
    PRIMARY_IMAGE_FIELD,
    RESERVED_FIELDS,
)


def file_url(entry: dict[str, Any] | None) -> str | None:
    """Return the hosted or external URL of a Notion file object."""
    if not entry:
        return None
    for kind in ("file", "external"):
        url = (entry.get(kind) or {}).get("url")
        if url:
            return str(url)
    return None


def has_image_extension(value: str) -> bool:
    path = urlsplit(value).path if "://" in value else value
    return PurePosixPath(path.lower()).suffix in IMAGE_EXTENSIONS


def _has_any_extension(value: str) -> bool:
    path = urlsplit(value).path if "://" in value else value
    return bool(PurePosixPath(path).suffix)


def render_context(properties: Properties, reserved: frozenset[str] = RESERVED_FIELDS) -> str:
    """Render every non-reserved, non-empty field as 'Name: value', joined by '; '."""
    parts: list[str] = []
    for name, prop in properties.items():
        if name in reserved or not isinstance(prop, dict):
            continue
        value = _render_value(prop)
        if value:
            parts.append(f"{name}: {value}")
    return "; ".join(parts)


def _render_value(prop: dict[str, Any]) -> str:
    kind = prop.get("type")
    if kind in ("rich_text", "title"):
        return " ".join(
            fragment.get("plain_text", "") for fragment in prop.get(kind) or []
        ).strip()
    if kind == "number":
        number = prop.get("number")
        return "" if number is None else str(number)
    if kind == "select":
        return ((prop.get("select") or {}).get("name") or "").strip()
    if kind == "multi_select":
        return ", ".join(
            option["name"] for option in prop.get("multi_select") or [] if option.get("name")
        )
    return ""


class AttachmentExtractor:
    """Builds an AttachmentBundle for one record."""

    def __init__(
        self,
        record_store: BaseRecordStore,
        fetcher: BaseImageFetcher,
        processor: BaseImageProcessor,
        *,
        primary_image_field: str = PRIMARY_IMAGE_FIELD,
        reserved_fields: frozenset[str] = RESERVED_FIELDS,
    ) -> None:
        self._record_store = record_store
        self._fetcher = fetcher
        self._processor = processor
        self._primary_image_field = primary_image_field
        self._reserved_fields = reserved_fields | {primary_image_field}

    def extract(self, record_id: str) -> AttachmentBundle | None:
        """Return the record's images and context, or None if it has no images.

        Raises:
            RecordStoreError: if the record or its blocks cannot be fetched.
        """
        Log.info("Extracting attachments", record_id=record_id)
        properties = self._record_store.retrieve_properties(record_id)

        images: list[ImageAttachment] = []
        seen_urls: set[str] = set()
        captured_at: datetime | None = None

        for origin, url in self._candidate_urls(record_id, properties):
            if url in seen_urls:
                continue
            seen_urls.add(url)
            try:
                raw = self._fetcher.fetch(url)
                if captured_at is None:
                    captured_at = self._processor.extract_captured_at(raw)
                prepared = self._processor.prepare(raw)
            except ImageError as exc:
                Log.warning(
                    f"Skipping image: {exc}", record_id=record_id, origin=origin
                )
                continue
            Log.info("Image attached", record_id=record_id, origin=origin)
            images.append(ImageAttachment(raw_bytes=prepared, source_url=url))

        if not images:
            Log.info("No images found on record", record_id=record_id)
            return None

        context = render_context(properties, self._reserved_fields)
        Log.info(
            "Attachments extracted",
            record_id=record_id,
            images=len(images),
            has_captured_at=captured_at is not None,
            has_context=bool(context),
        )
        return AttachmentBundle(
            images=tuple(images),
            source_record_id=record_id,
            captured_at=captured_at,
            context=context,
        )

    def _candidate_urls(
        self, record_id: str, properties: Properties
    ) -> Iterator[tuple[str, str]]:
        primary = properties.get(self._primary_image_field) or {}
        if primary.get("type") == "files":
            for entry in primary.get("files") or []:
                url = file_url(entry)
                if url:
                    yield self._primary_image_field, url

        for name, prop in properties.items():
            if name == self._primary_image_field or not isinstance(prop, dict):
                continue
            if prop.get("type") != "files":
                continue
            for entry in prop.get("files") or []:
                url = file_url(entry)
                if url and _looks_like_image(entry, url):
                    yield name, url

        for block in self._record_store.list_blocks(record_id):
            url = _block_image_url(block)
            if url:
                yield f"block:{block.get('id', '?')}", url


def _looks_like_image(entry: dict[str, Any], url: str) -> bool:
    name = str(entry.get("name") or "")
    if has_image_extension(name) or has_image_extension(url):
        return True
    # No extension at all: let the decoder decide.
    return not _has_any_extension(name) and not _has_any_extension(url)


def _block_image_url(block: Block) -> str | None:
    kind = block.get("type")
    if kind == "image":
        return file_url(block.get("image"))
    if kind == "file":
        url = file_url(block.get("file"))
        if url and has_image_extension(url):
            return url
    return None
