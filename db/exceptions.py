class StorageError(Exception):
    """Raised when the backing store fails to complete an operation."""


class UniqueConstraintError(StorageError):
    """Raised when an insert collides with an existing unique value."""


class RecordNotFoundError(Exception):
    """Raised when an operation targets a row that does not exist."""
