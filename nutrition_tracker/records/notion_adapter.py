from typing import Any

import httpx
from notion_client import Client
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from notion_client.helpers import collect_paginated_api

from nutrition_tracker.logging.logger import Log
from nutrition_tracker.records.base import BaseRecordStore, Block, Properties
from nutrition_tracker.records.exceptions import RecordNotFoundError, RecordStoreError
from nutrition_tracker.records.fields import MEAL_TIME_FIELD

_NOTION_MAX_PAGE_SIZE = 100
_NOTION_ERRORS = (HTTPResponseError, RequestTimeoutError, httpx.HTTPError)


class NotionRecordStore(BaseRecordStore):
    """Record store adapter built on the official Notion SDK."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        meal_time_field: str = MEAL_TIME_FIELD,
        client: Client | None = None,
    ) -> None:
        self._client = client or Client(auth=api_key, timeout_ms=timeout_seconds * 1000)
        self._meal_time_field = meal_time_field

    def list_pending_record_ids(self, collection_id: str, limit: int) -> list[str]:
        Log.info("Querying pending records", collection=_short(collection_id), limit=limit)
        try:
            response = self._client.databases.query(
                database_id=collection_id,
                page_size=max(1, min(limit, _NOTION_MAX_PAGE_SIZE)),
                filter={
                    "property": self._meal_time_field,
                    "date": {"is_empty": True},
                },
            )
        except _NOTION_ERRORS as exc:
            raise RecordStoreError(
                f"Failed to query database {collection_id}: {exc}"
            ) from exc
        ids = [page["id"] for page in response.get("results", [])][:limit]
        Log.info(f"Found {len(ids)} pending records")
        return ids

    def retrieve_properties(self, record_id: str) -> Properties:
        try:
            page: dict[str, Any] = self._client.pages.retrieve(page_id=record_id)
        except HTTPResponseError as exc:
            if exc.status == 404:
                raise RecordNotFoundError(f"Record {record_id} not found") from exc
            raise RecordStoreError(f"Failed to retrieve record {record_id}: {exc}") from exc
        except _NOTION_ERRORS as exc:
            raise RecordStoreError(f"Failed to retrieve record {record_id}: {exc}") from exc
        return page.get("properties", {})

    def list_blocks(self, record_id: str) -> list[Block]:
        try:
            return collect_paginated_api(
                self._client.blocks.children.list, block_id=record_id
            )
        except _NOTION_ERRORS as exc:
            raise RecordStoreError(
                f"Failed to list blocks of record {record_id}: {exc}"
            ) from exc

    def update_properties(self, record_id: str, properties: Properties) -> None:
        try:
            self._client.pages.update(page_id=record_id, properties=properties)
        except _NOTION_ERRORS as exc:
            raise RecordStoreError(f"Failed to update record {record_id}: {exc}") from exc


def _short(identifier: str) -> str:
    return f"{identifier[:8]}..." if len(identifier) > 8 else identifier
