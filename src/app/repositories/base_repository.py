"""
Base repository class providing common database operations.

This class is a reusable foundation for repositories that talk to the database
through SQLAlchemy's async sessions. Repositories flush but never commit: the
caller (the route) owns the transaction and commits once the work succeeded.

Database errors are NOT translated here. They are logged, the session is rolled
back, and the original exception propagates to the error classifier, which is
the only component that decides the HTTP outcome.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Generic, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.base import Base

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def rollback_on_error(db: AsyncSession, model_name: str):
    """
    Usage:
        async with rollback_on_error(self.db, self.model.__name__):
            ... DB ops that may raise ...
    Rolls the session back on any error and re-raises the error unchanged.
    """
    try:
        yield
    except IntegrityError:
        # Expected client-level scenario (duplicate, missing field, check): INFO, no stack
        logger.info("repo.integrity_error", extra={"model": model_name})
        await _safe_rollback(db, model_name)
        raise
    except Exception:
        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        await _safe_rollback(db, model_name)
        raise


async def _safe_rollback(db: AsyncSession, model_name: str) -> None:
    try:
        await db.rollback()
    except Exception:
        # A failed rollback must not hide the original error
        logger.exception("Failed to rollback session", extra={"model": model_name})


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Args:
            model: The SQLAlchemy model class (e.g. Producto, not Producto())
            db: The async database session
        """
        self.model = model
        self.db = db

    async def create(self, **kwargs: Any) -> ModelType:
        """Insert an entity, flush it and return it with server defaults loaded."""
        logger.debug(
            "repo.create.start",
            extra={
                "model": self.model.__name__,
                "operation": "create",
                # keys only, values may be sensitive
                "provided_keys": sorted(kwargs.keys()),
            },
        )
        start = time.perf_counter()

        async with rollback_on_error(self.db, self.model.__name__):
            entity = self.model(**kwargs)
            self.db.add(entity)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.create.success",
            extra={
                "model": self.model.__name__,
                "operation": "create",
                "id": getattr(entity, "id", None),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    async def get_by_id(self, entity_id: int) -> ModelType | None:
        """Return the entity with this primary key, or None."""
        async with rollback_on_error(self.db, self.model.__name__):
            result = await self.db.execute(select(self.model).where(self.model.id == entity_id))
            entity = result.scalar_one_or_none()

        logger.debug("repo.get_by_id", extra={"model": self.model.__name__, "id": entity_id, "found": entity is not None})
        return entity

    async def get_all(self) -> list[ModelType]:
        """Return every entity ordered by primary key."""
        async with rollback_on_error(self.db, self.model.__name__):
            result = await self.db.execute(select(self.model).order_by(self.model.id))
            entities = list(result.scalars().all())

        logger.debug("repo.get_all", extra={"model": self.model.__name__, "count": len(entities)})
        return entities

    async def update(self, entity_id: int, **kwargs: Any) -> ModelType | None:
        """Apply `kwargs` to the entity and flush. Returns None when it does not exist."""
        entity = await self.get_by_id(entity_id)
        if entity is None:
            return None

        async with rollback_on_error(self.db, self.model.__name__):
            for key, value in kwargs.items():
                setattr(entity, key, value)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.update.success",
            extra={"model": self.model.__name__, "operation": "update", "id": entity_id, "updated_keys": sorted(kwargs)},
        )
        return entity

    async def delete(self, entity_id: int) -> ModelType | None:
        """Delete the entity and return it. Returns None when it does not exist."""
        entity = await self.get_by_id(entity_id)
        if entity is None:
            return None

        async with rollback_on_error(self.db, self.model.__name__):
            await self.db.delete(entity)
            await self.db.flush()

        logger.info("repo.delete.success", extra={"model": self.model.__name__, "operation": "delete", "id": entity_id})
        return entity
