"""Fixtures for UserStore tests."""

import threading

import pytest

from app.repositories.user_store import UserStore, default_seed


class RecordingLock:
    """
    Context-manager lock that counts acquisitions.

    Injected into a UserStore to observe that write operations run under the lock.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self.acquisitions = 0

    def __enter__(self):
        self._lock.acquire()
        self.acquisitions += 1
        return self

    def __exit__(self, exc_type, exc, tb):
        self._lock.release()
        return False


@pytest.fixture
def empty_store() -> UserStore:
    """A store with no records; ids start at 1."""
    return UserStore()


@pytest.fixture
def seeded_store() -> UserStore:
    """
    A store holding the three sample users (ids 1, 2, 3).

    Records:
        1 Juan Pérez    juan@email.com    25
        2 María García  maria@email.com   30
        3 Carlos López  carlos@email.com  28
    """
    return UserStore(seed=default_seed())


@pytest.fixture
def sample_user_data() -> dict:
    """
    Simple, deterministic payload accepted by UserStore.create().
    Kept synchronous because it does not touch any backend.
    """
    return {"name": "Ana Torres", "email": "ana@email.com", "age": 31}
