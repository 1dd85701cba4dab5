"""Store error hierarchy.

All store implementations raise these errors for consistent error handling.
"""


class StoreError(Exception):
    """Base exception for all store errors.

    Store implementations wrap backend-specific errors in one of the
    StoreError subclasses.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when store connection fails."""

    pass


class NotFoundError(StoreError):
    """Raised when a requested record is not found.

    Raised for a specific lookup by id, never for empty search results.
    """

    pass


class ConflictError(StoreError):
    """Raised on unique constraint violation (e.g. duplicate tag)."""

    pass
