class StorageError(Exception):
    """Raised when an analysis result cannot be persisted."""
