"""
Storage factory: switch storage backend from config (lazy env version)
======================================================================

This module centralizes selection of the storage backend (in-memory vs DB)
so the rest of the app can stay ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the DB backend **only if** the selected backend is "postgres".
- Bootstraps the relational schema unless told not to.

Environment variables
---------------------
- STORAGE_BACKEND:  "memory" or "postgres" (default: "postgres" if DATABASE_DSN is set)
- DATABASE_DSN:     DSN string if backend=="postgres"
- DB_POOL_MIN_SIZE, DB_POOL_MAX_SIZE, DB_TIMEOUT: pool tuning
"""

import logging
import os
from typing import Optional

from shortener.config import _get_float, _get_int, default_backend
from shortener.storage.base import AuthStorage
from shortener.storage.memory import MemoryStorage

log = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, **kwargs) -> AuthStorage:
    """
    Return a storage backend based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" or "postgres". If omitted, derived from the environment.
    kwargs : dict
        For postgres: ``dsn``, ``min_size``, ``max_size``, ``timeout`` and
        ``bootstrap`` (default True) override the environment.

    Returns
    -------
    AuthStorage-compatible instance
    """
    # Read env **now** to avoid capturing stale values at import time
    dsn = kwargs.get("dsn") or os.getenv("DATABASE_DSN", "")
    be = (backend or default_backend(dsn)).strip().lower()

    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return MemoryStorage()

    if be == "postgres":
        if not dsn:
            raise ValueError("DATABASE_DSN is required for postgres backend")
        # Local import to avoid hard dependency when not using postgres
        from shortener.storage.db_storage import DBStorage

        min_size = kwargs.get("min_size") or max(1, _get_int("DB_POOL_MIN_SIZE", 1))
        max_size = kwargs.get("max_size") or _get_int("DB_POOL_MAX_SIZE", 10)
        storage = DBStorage.from_dsn(
            dsn,
            min_size=min_size,
            max_size=max(min_size, max_size),
            timeout=kwargs.get("timeout") or _get_float("DB_TIMEOUT", 5.0),
        )
        if kwargs.get("bootstrap", True):
            storage.bootstrap()
        return storage

    raise ValueError(f"Unknown storage backend: {be!r}")
