"""
Repository layer.

    from app.repositories import UserStore, ProductoRepository

`UserStore` keeps users in memory; `ProductoRepository` persists productos
through SQLAlchemy (built on the generic `BaseRepository`).
"""

from .base_repository import BaseRepository
from .producto_repository import ProductoRepository
from .user_store import UserStore

__all__ = [
    "BaseRepository",
    "ProductoRepository",
    "UserStore",
]
