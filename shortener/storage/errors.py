"""
Error taxonomy shared by every storage backend.

Both backends raise exactly these types, so the HTTP layer can map them to
status codes without knowing which backend is active:

    NotFoundError            -> 404
    DeletedError             -> 410
    ConflictError            -> 409 (single-URL saves; identifier still usable)
    PartialBatchError        -> 500
    BackendUnavailableError  -> 500
    OperationCancelledError  -> 500

Backend-internal exceptions (psycopg errors, pool timeouts) are chained via
``raise ... from exc`` so logs keep the original cause while callers only see
this hierarchy.
"""

from typing import Optional


class StoreError(Exception):
    """Base class for all storage errors."""


class NotFoundError(StoreError):
    """No record exists for the identifier."""

    def __init__(self, id: str) -> None:
        super().__init__(f"not found: {id!r}")
        self.id = id


class DeletedError(StoreError):
    """The identifier resolves to a soft-deleted record."""

    def __init__(self, id: str) -> None:
        super().__init__(f"record deleted: {id!r}")
        self.id = id


class ConflictError(StoreError):
    """
    The URL already has an active record.

    Not a failure: ``id`` is the existing identifier and callers are expected
    to use it.
    """

    def __init__(self, id: str) -> None:
        super().__init__(f"conflict: url already stored as {id!r}")
        self.id = id


class PartialBatchError(StoreError):
    """A batch produced a different number of identifiers than inputs."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"not all URLs have been saved: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class BackendUnavailableError(StoreError):
    """The backend is unreachable, unhealthy or already closed."""


class OperationCancelledError(StoreError):
    """The caller's deadline expired before the operation completed."""

    def __init__(self, message: str = "operation cancelled", timeout: Optional[float] = None) -> None:
        super().__init__(message)
        self.timeout = timeout
