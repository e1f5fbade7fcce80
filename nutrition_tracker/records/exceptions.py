class RecordStoreError(Exception):
    """Raised when the record store cannot be read or written."""


class RecordNotFoundError(RecordStoreError):
    """Raised when a record does not exist or is not shared with the integration."""
