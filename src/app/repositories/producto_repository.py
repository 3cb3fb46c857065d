"""
Producto repository: the persistence client behind the /api/productos routes.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.producto import Producto
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ProductoRepository(BaseRepository[Producto]):
    """Repository for Producto entity operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(Producto, db)

    async def create_producto(
        self,
        nombre: str,
        precio: float,
        descripcion: str,
        stock: int | None = None,
    ) -> Producto:
        """
        Create a product.

        `stock` defaults to 0 when not given. Uniqueness of `nombre` and the
        non-negative checks on `precio`/`stock` are enforced by the database.
        """
        logger.info("Creating new producto: %s", nombre)
        return await self.create(
            nombre=nombre.strip(),
            precio=float(precio),
            descripcion=descripcion,
            stock=stock if stock is not None else 0,
        )
