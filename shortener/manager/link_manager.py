"""
LinkManager module for the Shortener Platform.

Responsibilities:
    - Validate incoming URLs (syntactic parseability only)
    - Render short URLs as ``base_url + "/" + id``
    - Drive the storage contract on behalf of the HTTP layer, always passing
      the caller's identity explicitly

Design notes:
    - The manager never catches storage errors except ``ConflictError`` on
      single saves, which is an outcome rather than a failure: the existing
      identifier is rendered and the conflict flag is returned alongside it.
    - Everything else (NotFound, Deleted, backend failures) propagates to the
      app's exception handlers.
"""

import logging
import re
import uuid
from typing import List, NamedTuple, Optional, Sequence
from urllib.parse import urlsplit

from ..schemas import BatchShortenRequest, BatchShortenResponse, URLResponse
from ..storage.base import AuthStorage
from ..storage.errors import ConflictError

log = logging.getLogger(__name__)

INVALID_URL = "Cannot parse given string as URL"

# RFC 3986 scheme
SchemePattern = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


class ShortenOutcome(NamedTuple):
    short_url: str
    conflict: bool


class LinkManager:
    """Coordinates validation, rendering and storage calls for short links."""

    def __init__(self, storage: AuthStorage, base_url: str, timeout: Optional[float] = None):
        """
        Args:
            storage (AuthStorage): Backend storage instance.
            base_url (str): Externally visible prefix for short URLs.
            timeout (Optional[float]): Deadline passed to every storage call.
        """
        self.storage = storage
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ---------------------------------------------------------------------
    # Validation / rendering helpers
    # ---------------------------------------------------------------------
    @staticmethod
    def validate_url(raw: str) -> str:
        """
        Return the trimmed URL if it parses with a scheme and a host.

        Raises:
            ValueError: If the string cannot be parsed as a URL.
        """
        url = (raw or "").strip()
        try:
            parts = urlsplit(url)
            _ = parts.port  # raises on a malformed port
        except ValueError:
            raise ValueError(INVALID_URL) from None
        if not parts.scheme or not SchemePattern.match(parts.scheme) or not parts.netloc:
            raise ValueError(INVALID_URL)
        return url

    def short_url(self, id: str) -> str:
        return f"{self.base_url}/{id}"

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def shorten(self, raw_url: str, owner: uuid.UUID) -> ShortenOutcome:
        """
        Store a URL for ``owner`` and return its short URL.

        A URL that is already active yields the existing short URL with
        ``conflict=True``.

        Raises:
            ValueError: On a malformed URL.
        """
        url = self.validate_url(raw_url)
        try:
            id = self.storage.save_user(owner, url, timeout=self.timeout)
        except ConflictError as exc:
            log.debug("shorten conflict id=%s", exc.id)
            return ShortenOutcome(self.short_url(exc.id), True)
        return ShortenOutcome(self.short_url(id), False)

    def shorten_batch(
        self, owner: uuid.UUID, items: Sequence[BatchShortenRequest]
    ) -> List[BatchShortenResponse]:
        """
        Store every item in one storage batch.

        Raises:
            ValueError: If the batch is empty or any URL is malformed; nothing
                is stored in that case.
        """
        if not items:
            raise ValueError("Empty batch")
        urls = [self.validate_url(item.original_url) for item in items]
        ids = self.storage.save_user_batch(owner, urls, timeout=self.timeout)
        return [
            BatchShortenResponse(correlation_id=item.correlation_id, short_url=self.short_url(id))
            for item, id in zip(items, ids)
        ]

    def expand(self, id: str) -> str:
        """Resolve an identifier; NotFoundError / DeletedError propagate."""
        return self.storage.load(id, timeout=self.timeout)

    def user_urls(self, owner: uuid.UUID) -> List[URLResponse]:
        """Active URLs owned by ``owner``, in identifier order."""
        urls = self.storage.load_users(owner, timeout=self.timeout)
        ordered = sorted(urls.items(), key=lambda kv: (len(kv[0]), kv[0]))
        return [URLResponse(short_url=self.short_url(id), original_url=url) for id, url in ordered]

    def delete_user_urls(self, owner: uuid.UUID, ids: Sequence[str]) -> None:
        self.storage.delete_users(owner, list(ids), timeout=self.timeout)

    def ping(self) -> None:
        self.storage.ping(timeout=self.timeout)
