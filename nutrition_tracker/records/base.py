from abc import ABC, abstractmethod
from typing import Any

Properties = dict[str, dict[str, Any]]
Block = dict[str, Any]


class BaseRecordStore(ABC):
    """Contract for the document database holding one record per meal."""

    @abstractmethod
    def list_pending_record_ids(self, collection_id: str, limit: int) -> list[str]:
        """Return up to `limit` ids of records whose meal-time field is empty.

        Raises:
            RecordStoreError: if the collection cannot be queried.
        """

    @abstractmethod
    def retrieve_properties(self, record_id: str) -> Properties:
        """Return the record's properties keyed by field name.

        Raises:
            RecordStoreError: if the record cannot be fetched.
        """

    @abstractmethod
    def list_blocks(self, record_id: str) -> list[Block]:
        """Return all top-level content blocks of the record, in page order.

        Raises:
            RecordStoreError: if the blocks cannot be fetched.
        """

    @abstractmethod
    def update_properties(self, record_id: str, properties: Properties) -> None:
        """Write the given property values onto an existing record.

        Raises:
            RecordStoreError: if the update is rejected.
        """
