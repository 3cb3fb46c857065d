"""Fixtures for repository tests backed by a throwaway SQLite database."""

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401 – import to register models with Base.metadata
from app.database.base import Base
from app.repositories.producto_repository import ProductoRepository


@pytest.fixture
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session on a fresh SQLite file with every table created.

    A file per test (instead of a SAVEPOINT per test) keeps isolation simple even
    when the code under test commits or rolls back.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'repository.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with maker() as session:
            yield session
    finally:
        await engine.dispose()


@pytest.fixture
async def producto_repository(db_session: AsyncSession) -> ProductoRepository:
    """Return a ProductoRepository bound to the test session."""
    return ProductoRepository(db_session)


@pytest.fixture
def sample_producto_data() -> dict:
    return {"nombre": "Laptop", "precio": 999.99, "descripcion": "Laptop de 15 pulgadas"}
