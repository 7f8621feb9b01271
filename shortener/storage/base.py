"""
Base storage interfaces for the Shortener Platform.

Purpose:
    Define the contract both backends (in-memory and PostgreSQL) implement,
    so the HTTP layer and the manager never care where records live.

    The contract is layered the same way callers consume it:

        BaseStorage   save / load / ping / close
        BatchStorage  + save_batch
        AuthStorage   + user-scoped saves, loads, listing and soft-delete

Conventions:
    - Identifiers are strings; URLs are plain strings already validated by the
      caller (see ``LinkManager.validate_url``).
    - ``owner`` is always a ``uuid.UUID``. It is an explicit argument on every
      user-scoped call, never looked up from a side channel.
    - Every operation accepts a keyword-only ``timeout`` in seconds. It is the
      caller's deadline; ``None`` means the backend default.
    - Outcomes other than success are signalled with the exceptions from
      ``shortener.storage.errors``.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.

LLM Prompt Example:
    "Show how a narrow, layered storage interface lets an in-memory backend
    and a SQL backend be swapped without touching the HTTP handlers."
"""

import uuid
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def save(self, url: str, *, timeout: Optional[float] = None) -> str:
        """
        Store a URL and return its identifier.

        Raises:
            ConflictError: an active record for ``url`` already exists;
                ``exc.id`` is its identifier.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def load(self, id: str, *, timeout: Optional[float] = None) -> str:
        """
        Resolve an identifier to its URL.

        Raises:
            NotFoundError: the identifier was never issued.
            DeletedError: the record was soft-deleted.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def ping(self, *, timeout: Optional[float] = None) -> None:
        """Raise BackendUnavailableError unless the backend is healthy."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def close(self) -> None:
        """Release backend resources. Safe to call more than once."""
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class BatchStorage(BaseStorage):
    """Storage that can insert many URLs in one logical operation."""

    @abstractmethod  # pragma: no cover
    def save_batch(self, urls: Sequence[str], *, timeout: Optional[float] = None) -> List[str]:
        """
        Store all ``urls`` and return one identifier per input, in order.

        Already-active URLs yield their existing identifier (no conflict is
        raised). Either every input gets an identifier or the whole call fails
        with PartialBatchError.
        """
        raise NotImplementedError


class AuthStorage(BatchStorage):
    """Storage that scopes records to an owner identity."""

    @abstractmethod  # pragma: no cover
    def save_user(self, owner: uuid.UUID, url: str, *, timeout: Optional[float] = None) -> str:
        """Like ``save``; a fresh record is owned by ``owner``."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def save_user_batch(
        self, owner: uuid.UUID, urls: Sequence[str], *, timeout: Optional[float] = None
    ) -> List[str]:
        """Like ``save_batch``; fresh records are owned by ``owner``."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def load_user(self, owner: uuid.UUID, id: str, *, timeout: Optional[float] = None) -> str:
        """Like ``load``, but records owned by someone else are NotFoundError."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def load_users(self, owner: uuid.UUID, *, timeout: Optional[float] = None) -> Dict[str, str]:
        """Return ``{id: url}`` for the owner's active records (deleted ones excluded)."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete_users(
        self, owner: uuid.UUID, ids: Sequence[str], *, timeout: Optional[float] = None
    ) -> None:
        """
        Soft-delete the listed identifiers owned by ``owner``.

        Identifiers owned by someone else, unknown or already deleted are
        ignored. This is policy, not an error.
        """
        raise NotImplementedError
