"""
Core pytest configuration for the entire test suite.

This module provides only the essentials needed across ALL types of tests
(store, classifier, repositories, API, logging): logging setup, settings and
the application/test client.

Domain-specific fixtures are located in:
- tests/test_fixtures/store_fixtures.py
- tests/test_fixtures/database_fixtures.py
"""

from __future__ import annotations

# -------------------------------
# Standard library imports
# -------------------------------
import logging
from typing import Callable, Iterator

# -------------------------------
# Early logging tuning (IMPORTANT)
# -------------------------------
# Set the level for noisy third-party loggers at import time, before app modules
# (and SQLAlchemy / httpx) are imported, to keep collection output quiet.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.config.settings import Settings
from app.core.logging.builder import setup_logging
from app.main import create_app

logger = logging.getLogger(__name__)


def build_settings(**overrides) -> Settings:
    """
    Settings for tests: never read src/app/.env, log as text to the console,
    no debug fields in error bodies unless a test asks for ENV=development.
    """
    values = {
        "ENV": "testing",
        "LOG_FORMAT": "text",
        "LOG_LEVEL": "INFO",
        "LOG_TO_STDOUT": True,
        "DB_CREATE_TABLES": True,
        "SEED_USERS": True,
        "ENABLE_PRODUCTO_WRITES": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# ------------------------------------------------------------------------------------------------
# Logging
# ------------------------------------------------------------------------------------------------

@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install application logging for the entire test session.

    create_app() re-applies the same dictConfig for every app built in a test,
    so this only matters for tests that never build an app (store, classifier).
    """
    setup_logging(build_settings())

    yield


# ------------------------------------------------------------------------------------------------
# Settings / application
# ------------------------------------------------------------------------------------------------

@pytest.fixture
def make_settings(tmp_path) -> Callable[..., Settings]:
    """
    Factory for Settings bound to a per-test SQLite file.

    Usage:
        settings = make_settings(ENABLE_PRODUCTO_WRITES=True)
    """
    def _make(**overrides) -> Settings:
        overrides.setdefault("DATABASE_URL_OVERRIDE", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
        return build_settings(**overrides)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """
    TestClient running the app lifespan (database init / create tables / dispose).

    `raise_server_exceptions=False` so unexpected errors come back as the 500
    JSON envelope instead of being re-raised into the test.
    """
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def writable_client(make_settings) -> Iterator[TestClient]:
    """Client for an app that mounts the productos create/update/delete routes."""
    app = create_app(make_settings(ENABLE_PRODUCTO_WRITES=True, SEED_USERS=False))
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


# Domain fixtures: imported here so every test module can use them without importing
from app.tests.test_fixtures.store_fixtures import (  # noqa: E402,F401
    empty_store,
    seeded_store,
    sample_user_data,
)
from app.tests.test_fixtures.database_fixtures import (  # noqa: E402,F401
    db_session,
    producto_repository,
    sample_producto_data,
)
