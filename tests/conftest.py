"""
Global pytest fixtures for the Shortener Platform test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide an isolated in-memory storage for direct testing
    - Provide a LinkManager wired to that storage
    - Provide owner identities

Why an app factory?
    Using `create_app(storage=...)` ensures each test gets fresh in-memory
    state, eliminating cross-test flakiness.
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from shortener.app import create_app
from shortener.manager.link_manager import LinkManager
from shortener.storage.memory import MemoryStorage

BASE_URL = "http://localhost:8080"


@pytest.fixture
def storage() -> MemoryStorage:
    """Fresh in-memory storage; identifiers start at "0"."""
    return MemoryStorage()


@pytest.fixture
def manager(storage: MemoryStorage) -> LinkManager:
    return LinkManager(storage=storage, base_url=BASE_URL)


@pytest.fixture
def app(storage: MemoryStorage):
    return create_app(storage=storage, base_url=BASE_URL, auth_secret="test-secret")


@pytest.fixture
def client(app) -> TestClient:
    """
    Provide a TestClient bound to a fresh app.

    Notes:
        - The client keeps cookies, so consecutive requests share one identity.
        - Create a second TestClient on the same `app` to act as another user.
    """
    return TestClient(app)


@pytest.fixture
def owner() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def other_owner() -> uuid.UUID:
    return uuid.uuid4()
