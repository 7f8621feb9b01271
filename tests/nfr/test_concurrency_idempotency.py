"""
NFR: concurrent shortening of the same URL

Goal:
    Many threads shorten one URL at once through the manager and:
      - every caller gets the same short URL
      - exactly one caller sees a fresh link, the rest see conflicts
      - storage holds a single active record for that URL

How to run (opt-in):
    RUN_NFR=1 pytest tests/nfr/test_concurrency_idempotency.py -vv
"""

import os
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest

from shortener.manager.link_manager import LinkManager
from shortener.storage.memory import MemoryStorage

pytestmark = pytest.mark.nfr


def _should_run():
    return os.getenv("RUN_NFR") == "1"


@pytest.mark.skipif(not _should_run(), reason="NFR tests are opt-in; set RUN_NFR=1 to enable")
def test_concurrent_shorten_same_url_is_idempotent():
    storage = MemoryStorage()
    manager = LinkManager(storage=storage, base_url="http://localhost:8080")
    owner = uuid.uuid4()
    url = "https://example.com/idempotent"

    n = int(os.getenv("NFR_REQUESTS", "2000"))
    concurrency = max(1, int(os.getenv("NFR_CONCURRENCY", "16")))

    with ThreadPoolExecutor(max_workers=concurrency) as ex:
        outcomes = list(ex.map(lambda _: manager.shorten(url, owner), range(n)))

    assert len({o.short_url for o in outcomes}) == 1
    assert sum(not o.conflict for o in outcomes) == 1
    assert storage.load_users(owner) == {"0": url}


@pytest.mark.skipif(not _should_run(), reason="NFR tests are opt-in; set RUN_NFR=1 to enable")
def test_concurrent_distinct_urls_get_distinct_ids():
    storage = MemoryStorage()
    owner = uuid.uuid4()
    n = 2000

    with ThreadPoolExecutor(max_workers=16) as ex:
        ids = list(ex.map(lambda i: storage.save_user(owner, f"https://example.com/{i}"), range(n)))

    assert len(set(ids)) == n
    assert sorted(ids, key=int) == [str(i) for i in range(n)]
