"""
Storage module for the Shortener Platform (in-memory implementation).

Responsibilities:
    - Allocate identifiers from a process-local counter ("0", "1", ...)
    - Dedupe active URLs and signal conflicts
    - Track per-owner records and soft-delete them
    - Stay safe under the threadpool FastAPI runs sync handlers on

Design:
    - Records are explicit ``_Record`` objects with a ``RecordState``; deleting
      flips the state instead of dropping the key, so "deleted" and "never
      existed" stay distinguishable.
    - Three indices, all guarded by one shared/exclusive lock:
        _records   id    -> record
        _by_url    url   -> id        (active records only)
        _by_owner  owner -> {id -> record}
      The per-owner index holds the same record objects as ``_records``, so a
      delete is visible through both at once.
    - Nothing here survives a restart; identifiers restart at the counter
      start value.

LLM Prompt Example:
    "Explain how a reader/writer lock lets redirect-heavy traffic read the
     in-memory map concurrently while creates and deletes stay serialized."
"""

import contextlib
import enum
import itertools
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from .base import AuthStorage
from .errors import (
    BackendUnavailableError,
    ConflictError,
    DeletedError,
    NotFoundError,
    OperationCancelledError,
    PartialBatchError,
)

log = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class RecordState(enum.Enum):
    ACTIVE = "active"
    DELETED = "deleted"


@dataclass
class _Record:
    id: str
    original_url: str
    owner: Optional[uuid.UUID] = None
    state: RecordState = RecordState.ACTIVE
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class _SharedLock:
    """
    Writer-preferring shared/exclusive lock.

    Readers share the lock as long as no writer holds or waits for it.
    A ``timeout`` bounds how long acquisition may block; on expiry
    OperationCancelledError is raised and nothing is held.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextlib.contextmanager
    def shared(self, timeout: Optional[float] = None):
        with self._cond:
            ok = self._cond.wait_for(
                lambda: not self._writer and not self._writers_waiting, timeout
            )
            if not ok:
                raise OperationCancelledError("timed out waiting for shared lock", timeout)
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextlib.contextmanager
    def exclusive(self, timeout: Optional[float] = None):
        with self._cond:
            self._writers_waiting += 1
            try:
                ok = self._cond.wait_for(
                    lambda: not self._writer and not self._readers, timeout
                )
            finally:
                self._writers_waiting -= 1
            if not ok:
                # readers parked behind this writer must re-check
                self._cond.notify_all()
                raise OperationCancelledError("timed out waiting for exclusive lock", timeout)
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MemoryStorage(AuthStorage):
    def __init__(self, start: int = 0) -> None:
        """
        Initialize empty storage.

        Args:
            start (int): First identifier the counter hands out.
        """
        self._lock = _SharedLock()
        self._counter = itertools.count(start)
        self._records: Dict[str, _Record] = {}
        self._by_url: Dict[str, str] = {}
        self._by_owner: Dict[str, Dict[str, _Record]] = {}
        self._closed = False

    # ---- Internal helpers (caller holds the lock) -------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise BackendUnavailableError("memory storage is closed")

    def _insert(self, url: str, owner: Optional[uuid.UUID]) -> Tuple[str, bool]:
        """Return ``(id, created)``; an active duplicate only has its ``updated_at`` touched."""
        existing = self._by_url.get(url)
        if existing is not None:
            self._records[existing].updated_at = _now()
            return existing, False

        id = str(next(self._counter))
        record = _Record(id=id, original_url=url, owner=owner)
        self._records[id] = record
        self._by_url[url] = id
        if owner is not None:
            self._by_owner.setdefault(str(owner), {})[id] = record
        return id, True

    def _insert_many(self, urls: Sequence[str], owner: Optional[uuid.UUID]) -> List[str]:
        ids = [self._insert(url, owner)[0] for url in urls]
        if len(ids) != len(urls):
            raise PartialBatchError(len(urls), len(ids))
        return ids

    @staticmethod
    def _resolve(id: str, record: Optional[_Record]) -> str:
        if record is None:
            raise NotFoundError(id)
        if record.state is RecordState.DELETED:
            raise DeletedError(id)
        return record.original_url

    def _save(self, url: str, owner: Optional[uuid.UUID], timeout: Optional[float]) -> str:
        with self._lock.exclusive(timeout):
            self._check_open()
            id, created = self._insert(url, owner)
        log.debug("memory save id=%s created=%s owner=%s", id, created, owner)
        if not created:
            raise ConflictError(id)
        return id

    def _save_batch(
        self, urls: Sequence[str], owner: Optional[uuid.UUID], timeout: Optional[float]
    ) -> List[str]:
        if not urls:
            return []
        with self._lock.exclusive(timeout):
            self._check_open()
            ids = self._insert_many(urls, owner)
        log.debug("memory batch save count=%d owner=%s", len(ids), owner)
        return ids

    # ---- Contract methods -------------------------------------------------

    def save(self, url: str, *, timeout: Optional[float] = None) -> str:
        return self._save(url, None, timeout)

    def save_batch(self, urls: Sequence[str], *, timeout: Optional[float] = None) -> List[str]:
        return self._save_batch(urls, None, timeout)

    def load(self, id: str, *, timeout: Optional[float] = None) -> str:
        with self._lock.shared(timeout):
            self._check_open()
            return self._resolve(id, self._records.get(id))

    def save_user(self, owner: uuid.UUID, url: str, *, timeout: Optional[float] = None) -> str:
        return self._save(url, owner, timeout)

    def save_user_batch(
        self, owner: uuid.UUID, urls: Sequence[str], *, timeout: Optional[float] = None
    ) -> List[str]:
        return self._save_batch(urls, owner, timeout)

    def load_user(self, owner: uuid.UUID, id: str, *, timeout: Optional[float] = None) -> str:
        with self._lock.shared(timeout):
            self._check_open()
            return self._resolve(id, self._by_owner.get(str(owner), {}).get(id))

    def load_users(self, owner: uuid.UUID, *, timeout: Optional[float] = None) -> Dict[str, str]:
        with self._lock.shared(timeout):
            self._check_open()
            owned = self._by_owner.get(str(owner), {})
            return {
                id: record.original_url
                for id, record in owned.items()
                if record.state is RecordState.ACTIVE
            }

    def delete_users(
        self, owner: uuid.UUID, ids: Sequence[str], *, timeout: Optional[float] = None
    ) -> None:
        with self._lock.exclusive(timeout):
            self._check_open()
            owned = self._by_owner.get(str(owner))
            if not owned:
                return
            deleted_at = _now()
            for id in ids:
                record = owned.get(id)
                if record is None or record.state is RecordState.DELETED:
                    continue
                record.state = RecordState.DELETED
                record.deleted_at = deleted_at
                if self._by_url.get(record.original_url) == record.id:
                    del self._by_url[record.original_url]
        log.debug("memory delete owner=%s ids=%d", owner, len(ids))

    def ping(self, *, timeout: Optional[float] = None) -> None:
        with self._lock.shared(timeout):
            self._check_open()

    def close(self) -> None:
        with self._lock.exclusive():
            self._closed = True
